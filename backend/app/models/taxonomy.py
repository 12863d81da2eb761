from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.advert import advert_categories, advert_locations


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    lft = Column(Integer, nullable=False)
    rgt = Column(Integer, nullable=False)

    adverts = relationship("Advert", secondary=advert_categories, back_populates="categories")


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    state = Column(Text)  # geographic region shown in the state filter
    lft = Column(Integer, nullable=False)
    rgt = Column(Integer, nullable=False)

    adverts = relationship("Advert", secondary=advert_locations, back_populates="locations")
