"""
Composable filters over ``Query[Advert]``.

Every builder takes a query and returns a narrowed one, so they chain:

    active(premium(db.query(Advert)))

Time-based builders accept ``now`` for deterministic callers.
"""
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Query

from app.models.advert import Advert
from app.models.advertiser import Subuser
from app.models.order import Order, OrderItem
from app.models.taxonomy import Category, Location
from app.utils.timewindow import days_ago, utcnow


def approved(query: Query) -> Query:
    return query.filter(Advert.approved.is_(True))


def archived(query: Query) -> Query:
    return query.filter(Advert.archived.is_(True))


def unarchived(query: Query) -> Query:
    return query.filter(Advert.archived.is_(False))


def active(query: Query, now: datetime | None = None) -> Query:
    return unarchived(approved(query)).filter(Advert.active_until >= (now or utcnow()))


def inactive(query: Query, now: datetime | None = None) -> Query:
    return approved(query).filter(Advert.active_until <= (now or utcnow()))


def inactive_or_archived(query: Query, now: datetime | None = None) -> Query:
    return approved(query).filter(
        or_(Advert.archived.is_(True), Advert.active_until <= (now or utcnow()))
    )


def premium(query: Query, now: datetime | None = None) -> Query:
    return query.filter(Advert.premium_until >= (now or utcnow()))


def regular(query: Query, now: datetime | None = None) -> Query:
    return query.filter(
        or_(Advert.premium_until.is_(None), Advert.premium_until <= (now or utcnow()))
    )


def by_active_status(query: Query, is_active: bool, now: datetime | None = None) -> Query:
    return active(query, now) if is_active else inactive(query, now)


def by_premium_status(query: Query, is_premium: bool, now: datetime | None = None) -> Query:
    return premium(query, now) if is_premium else regular(query, now)


def most_recent_first(query: Query) -> Query:
    return query.order_by(Advert.advert_date.desc())


def most_premium_first(query: Query) -> Query:
    # NULLs sort last in SQLite descending order
    return query.order_by(Advert.premium_until.desc())


def in_last_seconds(query: Query, seconds: int, now: datetime | None = None) -> Query:
    """Adverts that went live in the last ``seconds``, on whole-minute boundaries."""
    minute = (now or utcnow()).replace(second=0, microsecond=0)
    return query.filter(
        Advert.live_at.between(minute - timedelta(seconds=seconds), minute - timedelta(seconds=1))
    )


def age_in_days(query: Query, age: int, now: datetime | None = None) -> Query:
    return query.filter(
        Advert.live_at >= days_ago(age, now),
        Advert.live_at < days_ago(age - 1, now),
    )


def expired_yesterday(query: Query, now: datetime | None = None) -> Query:
    now = now or utcnow()
    return query.filter(Advert.active_until >= days_ago(1, now), Advert.active_until < now)


def premium_expired_yesterday(query: Query, now: datetime | None = None) -> Query:
    now = now or utcnow()
    return query.filter(Advert.premium_until >= days_ago(1, now), Advert.premium_until < now)


def in_location(query: Query, location: Location) -> Query:
    return (
        query.join(Advert.locations)
        .filter(Location.lft.between(location.lft, location.rgt))
        .distinct()
    )


def in_category(query: Query, category: Category) -> Query:
    return (
        query.join(Advert.categories)
        .filter(Category.lft.between(category.lft, category.rgt))
        .distinct()
    )


def for_subuser(query: Query, subuser: Subuser) -> Query:
    return (
        query.outerjoin(Advert.order_items)
        .outerjoin(Order, Order.id == OrderItem.order_id)
        .filter(or_(Advert.subuser_id == subuser.id, Order.subuser_id == subuser.id))
        .distinct()
    )


def not_associated_with_account(query: Query) -> Query:
    return query.filter(Advert.advertiser_id.is_(None))


def matching(query: Query, text: str) -> Query:
    """Plain substring match on reference, title and submitter e-mail."""
    pattern = f"%{text}%"
    return query.filter(
        Advert.reference.ilike(pattern)
        | Advert.job_title.ilike(pattern)
        | Advert.email.ilike(pattern)
    )
