from datetime import datetime

from pydantic import BaseModel


class AdvertCreate(BaseModel):
    # Presence is checked by validate_advert so every missing field is reported.
    reference: str | None = None
    job_title: str | None = None
    job_type: str | None = None
    description: str | None = None
    telephone: str | None = None
    submitters_forename: str | None = None
    submitters_surname: str | None = None
    email: str | None = None
    email_confirmation: str | None = None
    password: str | None = None
    password_retype: str | None = None
    advertiser_id: int | None = None
    subuser_id: int | None = None
    category_ids: list[int] | None = None
    location_ids: list[int] | None = None


class AdvertUpdate(BaseModel):
    reference: str | None = None
    job_title: str | None = None
    job_type: str | None = None
    description: str | None = None
    telephone: str | None = None
    submitters_forename: str | None = None
    submitters_surname: str | None = None
    category_ids: list[int] | None = None
    location_ids: list[int] | None = None
    make_premium: bool | None = None


class AdvertResponse(BaseModel):
    id: int
    slug: str
    reference: str
    job_title: str
    job_type: str
    description: str
    telephone: str
    submitters_full_name: str
    email: str | None
    approved: bool
    archived: bool
    advert_date: datetime | None
    live_at: datetime | None
    active_until: datetime | None
    premium_until: datetime | None
    created_at: datetime
    updated_at: datetime
    premium: bool
    active: bool
    bumpable: bool
    readvertisable: bool
    premiumable: bool
    archiveable: bool
    unarchiveable: bool
    categories: list[str] = []
    locations: list[str] = []


class AdvertListResponse(BaseModel):
    adverts: list[AdvertResponse]
    total: int
    page: int
    per_page: int


class ContactResponse(BaseModel):
    email: str | None
    name: str
    source: str
    company_name: str
    last_posted_date: datetime


class ShortUrlResponse(BaseModel):
    url: str


class StateOption(BaseModel):
    state: str
    selected: bool


class StateSelectorResponse(BaseModel):
    rows: list[list[StateOption]]
