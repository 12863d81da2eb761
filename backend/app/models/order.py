from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    kind = Column(Text, nullable=False, default="advert")
    action = Column(Text, nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    advertiser_id = Column(Integer, ForeignKey("advertisers.id", ondelete="SET NULL"))
    subuser_id = Column(Integer, ForeignKey("subusers.id", ondelete="SET NULL"))
    company_name = Column(Text)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime)

    subuser = relationship("Subuser")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    advert_id = Column(Integer, ForeignKey("adverts.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
    advert = relationship("Advert", back_populates="order_items")
