from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Advertiser(Base):
    __tablename__ = "advertisers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    forename = Column(Text)
    surname = Column(Text)
    company_name = Column(Text)
    created_at = Column(DateTime, nullable=False)

    adverts = relationship("Advert", back_populates="advertiser")
    subusers = relationship("Subuser", back_populates="advertiser", cascade="all, delete-orphan")


class Subuser(Base):
    __tablename__ = "subusers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    advertiser_id = Column(Integer, ForeignKey("advertisers.id", ondelete="CASCADE"), nullable=False)
    email = Column(Text, nullable=False)
    forename = Column(Text)
    surname = Column(Text)

    advertiser = relationship("Advertiser", back_populates="subusers")
