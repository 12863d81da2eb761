from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.advert import Advert
from app.models.advertiser import Advertiser, Subuser
from app.models.taxonomy import Category, Location
from app.schemas.advert import (
    AdvertCreate,
    AdvertListResponse,
    AdvertResponse,
    AdvertUpdate,
    ContactResponse,
    ShortUrlResponse,
    StateSelectorResponse,
)
from app.services import advert_queries as queries
from app.services import advert_service, linkage_service
from app.services.advert_validation import AdvertValidationError
from app.services.link_service import advert_slug, short_url
from app.services.state_filter import advert_states, state_selector
from app.utils.timewindow import utcnow

router = APIRouter(prefix="/adverts", tags=["adverts"])


def _advert_to_response(advert: Advert) -> AdvertResponse:
    now = utcnow()
    return AdvertResponse(
        id=advert.id,
        slug=advert_slug(advert),
        reference=advert.reference,
        job_title=advert.job_title,
        job_type=advert.job_type,
        description=advert.description,
        telephone=advert.telephone,
        submitters_full_name=advert.full_name,
        email=advert.email,
        approved=advert.approved,
        archived=advert.archived,
        advert_date=advert.advert_date,
        live_at=advert.live_at,
        active_until=advert.active_until,
        premium_until=advert.premium_until,
        created_at=advert.created_at,
        updated_at=advert.updated_at,
        premium=advert.is_premium(now),
        active=advert.is_active(now),
        bumpable=advert.is_bumpable(now),
        readvertisable=advert.is_readvertisable(now),
        premiumable=advert.is_premiumable(now),
        archiveable=advert.is_archiveable(now),
        unarchiveable=advert.is_unarchiveable(now),
        categories=[c.name for c in advert.categories],
        locations=[loc.name for loc in advert.locations],
    )


def _validation_error(exc: AdvertValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=[{"field": e.field, "message": e.message} for e in exc.errors],
    )


def _get_advert(db: Session, advert_id: int) -> Advert:
    advert = db.query(Advert).filter(Advert.id == advert_id).first()
    if not advert:
        raise HTTPException(status_code=404, detail="Advert not found")
    return advert


@router.post("", response_model=AdvertResponse, status_code=201)
async def create_advert(req: AdvertCreate, db: Session = Depends(get_db)):
    if req.advertiser_id is not None and db.get(Advertiser, req.advertiser_id) is None:
        raise HTTPException(status_code=404, detail="Advertiser not found")
    if req.subuser_id is not None:
        subuser = db.get(Subuser, req.subuser_id)
        if not subuser:
            raise HTTPException(status_code=404, detail="Subuser not found")
        if subuser.advertiser_id != req.advertiser_id:
            raise HTTPException(status_code=422, detail="Subuser does not belong to this advertiser")
    try:
        advert = advert_service.create_advert(
            db, req.model_dump(exclude={"advertiser_id"}), advertiser_id=req.advertiser_id
        )
    except AdvertValidationError as exc:
        raise _validation_error(exc)
    return _advert_to_response(advert)


@router.get("", response_model=AdvertListResponse)
async def list_adverts(
    active: bool | None = None,
    premium: bool | None = None,
    archived: bool | None = None,
    expired_yesterday: bool = False,
    location_id: int | None = None,
    category_id: int | None = None,
    subuser_id: int | None = None,
    unowned: bool = False,
    q: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    now = utcnow()
    query = db.query(Advert)

    if active is not None:
        query = queries.by_active_status(query, active, now)
    if premium is not None:
        query = queries.by_premium_status(query, premium, now)
    if archived is not None:
        query = queries.archived(query) if archived else queries.unarchived(query)
    if expired_yesterday:
        query = queries.expired_yesterday(query, now)
    if location_id is not None:
        location = db.get(Location, location_id)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        query = queries.in_location(query, location)
    if category_id is not None:
        category = db.get(Category, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        query = queries.in_category(query, category)
    if subuser_id is not None:
        subuser = db.get(Subuser, subuser_id)
        if not subuser:
            raise HTTPException(status_code=404, detail="Subuser not found")
        query = queries.for_subuser(query, subuser)
    if unowned:
        query = queries.not_associated_with_account(query)
    if q:
        query = queries.matching(query, q)

    total = query.count()
    query = queries.most_recent_first(queries.most_premium_first(query))
    adverts = query.offset((page - 1) * per_page).limit(per_page).all()

    return AdvertListResponse(
        adverts=[_advert_to_response(a) for a in adverts],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/states", response_model=StateSelectorResponse)
async def list_states(selected: str | None = None, db: Session = Depends(get_db)):
    adverts = queries.active(db.query(Advert)).all()
    return StateSelectorResponse(rows=state_selector(advert_states(adverts), selected))


@router.get("/{advert_id}", response_model=AdvertResponse)
async def get_advert(advert_id: int, db: Session = Depends(get_db)):
    return _advert_to_response(_get_advert(db, advert_id))


@router.put("/{advert_id}", response_model=AdvertResponse)
async def update_advert(advert_id: int, req: AdvertUpdate, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    try:
        advert = advert_service.update_advert(db, advert, req.model_dump(exclude_unset=True))
    except AdvertValidationError as exc:
        raise _validation_error(exc)
    return _advert_to_response(advert)


@router.post("/{advert_id}/advertise", response_model=AdvertResponse)
async def advertise_advert(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    if not (advert.never_advertised() or advert.is_readvertisable()):
        raise HTTPException(status_code=409, detail="Advert is still running")
    return _advert_to_response(advert_service.advertise(db, advert))


@router.post("/{advert_id}/bump", response_model=AdvertResponse)
async def bump_advert(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    if not advert.is_bumpable():
        raise HTTPException(status_code=409, detail="Only active, non-premium adverts can be bumped")
    return _advert_to_response(advert_service.bump(db, advert))


@router.post("/{advert_id}/premium-upgrade", response_model=AdvertResponse)
async def premium_upgrade_advert(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    if not advert.is_premiumable():
        raise HTTPException(status_code=409, detail="Only active, non-premium adverts can be upgraded")
    return _advert_to_response(advert_service.premium_upgrade(db, advert))


@router.post("/{advert_id}/archive", response_model=AdvertResponse)
async def archive_advert(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    if not advert.is_archiveable():
        raise HTTPException(status_code=409, detail="Advert cannot be archived")
    return _advert_to_response(advert_service.archive(db, advert))


@router.post("/{advert_id}/unarchive", response_model=AdvertResponse)
async def unarchive_advert(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    if not advert.is_unarchiveable():
        raise HTTPException(status_code=409, detail="Advert cannot be unarchived")
    return _advert_to_response(advert_service.unarchive(db, advert))


@router.get("/{advert_id}/short-url", response_model=ShortUrlResponse)
async def get_short_url(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    return ShortUrlResponse(url=await short_url(db, advert))


@router.get("/{advert_id}/contact", response_model=ContactResponse)
async def get_contact(advert_id: int, db: Session = Depends(get_db)):
    advert = _get_advert(db, advert_id)
    contact = linkage_service.resolve_contact(advert)
    return ContactResponse(
        email=contact.email,
        name=contact.name,
        source=contact.source,
        company_name=linkage_service.submitters_company_name(advert),
        last_posted_date=linkage_service.last_posted_date(db, advert),
    )
