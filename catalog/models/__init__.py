from catalog.models.category import Category
from catalog.models.media import MediaItem
from catalog.models.order import Order, OrderItem, OrderStatus
from catalog.models.product import Product

__all__ = [
    "Category",
    "MediaItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
]
