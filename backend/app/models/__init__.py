from app.models.advert import Advert, JOB_TYPES, advert_categories, advert_locations
from app.models.advertiser import Advertiser, Subuser
from app.models.taxonomy import Category, Location
from app.models.order import Order, OrderItem, Product

__all__ = [
    "Advert", "JOB_TYPES", "advert_categories", "advert_locations",
    "Advertiser", "Subuser", "Category", "Location",
    "Order", "OrderItem", "Product",
]
