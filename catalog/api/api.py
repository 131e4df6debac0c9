import logging

from fastapi import APIRouter

from catalog.api.endpoints import (
    admin_categories,
    admin_media,
    admin_orders,
    admin_products,
    admin_tools,
    categories,
    orders,
    products,
)

logger = logging.getLogger(__name__)

api_router = APIRouter()
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])

# 관리자 (인증은 앞단 게이트웨이에서 처리)
api_router.include_router(admin_categories.router, prefix="/admin/categories", tags=["admin"])
api_router.include_router(admin_products.router, prefix="/admin/products", tags=["admin"])
api_router.include_router(admin_orders.router, prefix="/admin/orders", tags=["admin"])
api_router.include_router(admin_media.router, prefix="/admin/media", tags=["admin"])
api_router.include_router(admin_tools.router, prefix="/admin/tools", tags=["admin"])
