import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.category import Category
from catalog.services.category_manager import CategoryManager
from catalog.services.product_manager import ProductManager

logger = logging.getLogger(__name__)


async def initialize_categories(db: AsyncSession):
    """데모 카탈로그 생성 (카테고리가 이미 있으면 건너뜀)"""
    try:
        existing = await db.scalar(select(Category.id).limit(1))
        if existing is not None:
            logger.info("Categories already initialized, skipping")
            return

        manager = CategoryManager(db)

        # 최상위 카테고리
        electronics = await manager.create_category("Electronics", "electronics", sort_order=1)
        accessories = await manager.create_category("Accessories", "accessories", sort_order=2)

        # 하위 카테고리
        computers = await manager.create_category("Computers", "computers", electronics.id)
        smartphones = await manager.create_category("Smartphones", "smartphones", electronics.id)
        laptops = await manager.create_category("Laptops", "laptops", computers.id)
        await manager.create_category("Cables", "cables", accessories.id, featured_only=True)

        products = ProductManager(db)
        await products.create_product({
            "name": "Phone X", "slug": "phone-x", "sku": "PX-1", "price": 99900, "category_id": smartphones.id,
        })
        await products.create_product({
            "name": "Laptop Pro 14", "slug": "laptop-pro-14", "sku": "LP-14", "price": 199900,
            "category_id": laptops.id, "is_featured": True,
        })

        logger.info("Categories initialized successfully")
    except Exception as e:
        logger.error("Error initializing categories.", extra={"error": str(e)}, exc_info=True)
        await db.rollback()
