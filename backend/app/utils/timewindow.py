from datetime import datetime, timedelta, timezone

from app.config import settings

EXPIRY_DAYS = 28
PREMIUM_DAYS = 7


def utcnow() -> datetime:
    """Naive UTC now, matching how SQLite hands timestamps back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def scaled_days(days: float, multiplier: float | None = None) -> timedelta:
    factor = settings.time_multiplier if multiplier is None else multiplier
    return timedelta(days=days) * factor


def expiry_window(multiplier: float | None = None) -> timedelta:
    return scaled_days(EXPIRY_DAYS, multiplier)


def premium_window(multiplier: float | None = None) -> timedelta:
    return scaled_days(PREMIUM_DAYS, multiplier)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    return (now or utcnow()) - timedelta(days=days)
