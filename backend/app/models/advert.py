from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import relationship

from app.config import settings
from app.database import Base
from app.utils.security import advert_token, verify_password
from app.utils.timewindow import utcnow

JOB_TYPES = ("Permanent", "Temporary", "Contract")

advert_categories = Table(
    "advert_categories",
    Base.metadata,
    Column("advert_id", Integer, ForeignKey("adverts.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

advert_locations = Table(
    "advert_locations",
    Base.metadata,
    Column("advert_id", Integer, ForeignKey("adverts.id", ondelete="CASCADE"), primary_key=True),
    Column("location_id", Integer, ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True),
)


class Advert(Base):
    __tablename__ = "adverts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reference = Column(Text, nullable=False)
    job_title = Column(Text, nullable=False)
    job_type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    telephone = Column(Text, nullable=False)
    submitters_forename = Column(Text, nullable=False)
    submitters_surname = Column(Text, nullable=False)
    email = Column(Text)
    password_digest = Column(Text)
    approved = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)
    advert_date = Column(DateTime)
    live_at = Column(DateTime)
    active_until = Column(DateTime)
    premium_until = Column(DateTime)
    short_url_cache = Column(Text)
    advertiser_id = Column(Integer, ForeignKey("advertisers.id", ondelete="SET NULL"))
    subuser_id = Column(Integer, ForeignKey("subusers.id", ondelete="SET NULL"))
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    advertiser = relationship("Advertiser", back_populates="adverts")
    subuser = relationship("Subuser")
    categories = relationship("Category", secondary=advert_categories, back_populates="adverts")
    locations = relationship("Location", secondary=advert_locations, back_populates="adverts")
    order_items = relationship(
        "OrderItem",
        back_populates="advert",
        cascade="all, delete-orphan",
        order_by="[OrderItem.created_at, OrderItem.id]",
    )

    # Staged by request_premium_removal(), consumed by the next save.
    _premium_removal_requested = False

    def __str__(self) -> str:
        return self.job_title or ""

    @property
    def full_name(self) -> str:
        return " ".join([self.submitters_forename or "", self.submitters_surname or ""])

    @property
    def token(self) -> str:
        return advert_token(settings.site_name, self.password_digest or "")

    def authenticate(self, password: str) -> bool:
        if not self.password_digest:
            return False
        return verify_password(self.password_digest, password)

    # --- state predicates ---

    def is_premium(self, now: datetime | None = None) -> bool:
        return self.premium_until is not None and self.premium_until >= (now or utcnow())

    def is_active(self, now: datetime | None = None) -> bool:
        return self.active_until is not None and self.active_until >= (now or utcnow())

    def is_active_and_not_archived(self, now: datetime | None = None) -> bool:
        return self.is_active(now) and not self.archived

    def never_advertised(self) -> bool:
        return not self.approved

    # --- action checks ---

    def is_bumpable(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return self.is_active(now) and not self.is_premium(now)

    def is_readvertisable(self, now: datetime | None = None) -> bool:
        return not self.is_active(now)

    def is_premiumable(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return self.is_active(now) and not self.is_premium(now)

    def is_archiveable(self, now: datetime | None = None) -> bool:
        return self.is_active(now) and not self.archived

    def is_unarchiveable(self, now: datetime | None = None) -> bool:
        return self.is_active(now) and bool(self.archived)

    # --- staged premium removal ---

    def request_premium_removal(self):
        self._premium_removal_requested = True

    @property
    def premium_removal_requested(self) -> bool:
        return self._premium_removal_requested

    def consume_premium_removal(self) -> bool:
        """Clear premium_until if removal was staged. Returns whether it was."""
        if not self._premium_removal_requested:
            return False
        self.premium_until = None
        self._premium_removal_requested = False
        return True
