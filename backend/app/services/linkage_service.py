"""
Who stands behind an advert, and which orders paid for it.

Contact resolution is priority-ordered: a delegate subuser beats the
owning advertiser, who beats the advert's own submitter. Order items are
walked earliest-created first (ties broken by id).
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.advert import Advert
from app.models.advertiser import Subuser
from app.models.order import Order, OrderItem, Product

logger = logging.getLogger("app")


@dataclass(frozen=True)
class Contact:
    email: str | None
    name: str
    source: str  # "subuser" | "advertiser" | "submitter"


def _name(forename: str | None, surname: str | None) -> str:
    return " ".join(part for part in (forename, surname) if part)


def _ordered_items(advert: Advert) -> list[OrderItem]:
    return sorted(advert.order_items, key=lambda item: (item.created_at or datetime.max, item.id or 0))


def resolve_subuser(advert: Advert) -> Subuser | None:
    if advert.subuser_id is not None:
        return advert.subuser
    for item in _ordered_items(advert):
        if item.order is not None and item.order.subuser is not None:
            return item.order.subuser
    return None


def resolve_contact(advert: Advert) -> Contact:
    subuser = resolve_subuser(advert)
    if subuser is not None:
        return Contact(subuser.email, _name(subuser.forename, subuser.surname), "subuser")
    if advert.advertiser is not None:
        owner = advert.advertiser
        return Contact(owner.email, _name(owner.forename, owner.surname), "advertiser")
    return Contact(
        advert.email,
        _name(advert.submitters_forename, advert.submitters_surname),
        "submitter",
    )


def contact_email(advert: Advert) -> str | None:
    return resolve_contact(advert).email


def submitters_company_name(advert: Advert) -> str:
    if advert.advertiser is not None:
        return advert.advertiser.company_name or ""
    items = _ordered_items(advert)
    if items and items[0].order is not None:
        return items[0].order.company_name or ""
    return ""


def last_posted_date(db: Session, advert: Advert) -> datetime:
    """When the advert was last paid to go live; its creation time otherwise.

    This only feeds display, so lookup failures fall back rather than raise.
    """
    try:
        completed_at = (
            db.query(Order.completed_at)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .join(Product, Product.id == OrderItem.product_id)
            .filter(OrderItem.advert_id == advert.id)
            .filter(Product.action == "advertise")
            .filter(Order.completed_at.isnot(None))
            .order_by(Order.completed_at.desc())
            .limit(1)
            .scalar()
        )
    except Exception as exc:
        logger.debug("last_posted_date lookup failed for advert %s: %s", advert.id, exc)
        return advert.created_at
    return completed_at or advert.created_at


def last_paid_order(db: Session, advert: Advert) -> Order | None:
    order_ids = {item.order_id for item in advert.order_items}
    if not order_ids:
        return None
    return (
        db.query(Order)
        .filter(Order.id.in_(order_ids))
        .filter(Order.status == "completed")
        .filter(Order.completed_at.isnot(None))
        .order_by(Order.completed_at.desc())
        .first()
    )
