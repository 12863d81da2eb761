import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.advert import Advert
from app.models.order import OrderItem
from app.models.taxonomy import Category, Location
from app.services.advert_validation import AdvertValidationError, FieldError, validate_advert
from app.utils.security import hash_password
from app.utils.timewindow import expiry_window, premium_window, utcnow

logger = logging.getLogger("app")

ADVERT_FIELDS = (
    "reference", "job_title", "job_type", "description", "telephone",
    "submitters_forename", "submitters_surname", "email",
)


def save(db: Session, advert: Advert, now: datetime | None = None) -> Advert:
    """Persist an advert, applying creation defaults and staged commands."""
    now = now or utcnow()
    if advert.id is None:
        advert.created_at = advert.created_at or now
        if advert.advert_date is None:
            advert.advert_date = now
        if advert.active_until is None:
            advert.active_until = now + expiry_window()
    if advert.consume_premium_removal():
        logger.info("Premium status removed from advert %s", advert.id)
    advert.updated_at = now
    db.add(advert)
    db.commit()
    db.refresh(advert)
    return advert


def _lookup(db: Session, model, field: str, label: str, ids, errors: list[FieldError]):
    if ids is None:
        return None
    rows = db.query(model).filter(model.id.in_(ids)).all()
    missing = sorted(set(ids) - {row.id for row in rows})
    if missing:
        errors.append(FieldError(field, f"Unknown {label}: {', '.join(map(str, missing))}"))
    return rows


def _lookup_taxonomies(db: Session, category_ids, location_ids):
    """Load the requested categories and locations, reporting unknown ids."""
    errors: list[FieldError] = []
    categories = _lookup(db, Category, "category_ids", "categories", category_ids, errors)
    locations = _lookup(db, Location, "location_ids", "locations", location_ids, errors)
    return categories, locations, errors


def _attach_taxonomies(advert: Advert, categories, locations):
    if categories is not None:
        advert.categories = categories
    if locations is not None:
        advert.locations = locations


def create_advert(
    db: Session,
    data: dict,
    advertiser_id: int | None = None,
    now: datetime | None = None,
) -> Advert:
    errors = validate_advert(data, on_create=True)
    categories, locations, taxonomy_errors = _lookup_taxonomies(
        db, data.get("category_ids"), data.get("location_ids")
    )
    errors += taxonomy_errors
    if errors:
        raise AdvertValidationError(errors)

    advert = Advert(
        **{field: data.get(field) for field in ADVERT_FIELDS},
        password_digest=hash_password(data["password"]),
        approved=False,
        archived=False,
        advertiser_id=advertiser_id,
        subuser_id=data.get("subuser_id"),
    )
    _attach_taxonomies(advert, categories, locations)
    save(db, advert, now)
    logger.info("Advert %s created (%s)", advert.id, advert.job_title)
    return advert


def update_advert(db: Session, advert: Advert, changes: dict, now: datetime | None = None) -> Advert:
    make_premium = changes.pop("make_premium", None)

    merged = {field: getattr(advert, field) for field in ADVERT_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in ADVERT_FIELDS})
    errors = validate_advert(merged, on_create=False)
    categories, locations, taxonomy_errors = _lookup_taxonomies(
        db, changes.get("category_ids"), changes.get("location_ids")
    )
    errors += taxonomy_errors
    if errors:
        raise AdvertValidationError(errors)

    if make_premium is False:
        advert.request_premium_removal()
    for field in ADVERT_FIELDS:
        if field in changes:
            setattr(advert, field, changes[field])
    _attach_taxonomies(advert, categories, locations)
    return save(db, advert, now)


# --- lifecycle actions ---
# Preconditions are the caller's job; see the is_* predicates on Advert.

def advertise(db: Session, advert: Advert, order_item: OrderItem | None = None,
              now: datetime | None = None) -> Advert:
    now = now or utcnow()
    advert.approved = True
    advert.active_until = now + expiry_window()  # a full run from now
    advert.advert_date = now
    advert.live_at = now
    advert.archived = False
    save(db, advert, now)
    logger.info("Advert %s advertised until %s", advert.id, advert.active_until)
    return advert


def bump(db: Session, advert: Advert, order_item: OrderItem | None = None,
         now: datetime | None = None) -> Advert:
    now = now or utcnow()
    advert.advert_date = now
    save(db, advert, now)
    logger.info("Advert %s bumped", advert.id)
    return advert


def premium_upgrade(db: Session, advert: Advert, order_item: OrderItem | None = None,
                    now: datetime | None = None) -> Advert:
    now = now or utcnow()
    advert.premium_until = now + premium_window()
    save(db, advert, now)
    logger.info("Advert %s premium until %s", advert.id, advert.premium_until)
    return advert


def archive(db: Session, advert: Advert, now: datetime | None = None) -> Advert:
    advert.archived = True
    save(db, advert, now)
    logger.info("Advert %s archived", advert.id)
    return advert


def unarchive(db: Session, advert: Advert, now: datetime | None = None) -> Advert:
    advert.archived = False
    save(db, advert, now)
    logger.info("Advert %s unarchived", advert.id)
    return advert
