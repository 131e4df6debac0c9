from catalog.schemas.category import CategoryCreate, CategoryResponse, CategoryTreeNode, CategoryUpdate
from catalog.schemas.media import MediaCreate, MediaResponse
from catalog.schemas.order import (
    OrderCreate,
    OrderCreateResponse,
    OrderItemCreate,
    OrderResponse,
    OrderStatusUpdate,
)
from catalog.schemas.product import GalleryImage, ProductCreate, ProductPage, ProductResponse, ProductUpdate

__all__ = [
    "CategoryCreate",
    "CategoryResponse",
    "CategoryTreeNode",
    "CategoryUpdate",
    "GalleryImage",
    "MediaCreate",
    "MediaResponse",
    "OrderCreate",
    "OrderCreateResponse",
    "OrderItemCreate",
    "OrderResponse",
    "OrderStatusUpdate",
    "ProductCreate",
    "ProductPage",
    "ProductResponse",
    "ProductUpdate",
]
