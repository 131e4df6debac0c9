from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.database import get_read_db, get_write_db
from catalog.services.catalog_service import CatalogService
from catalog.services.category_manager import CategoryManager
from catalog.services.media_manager import MediaManager
from catalog.services.order_manager import OrderManager
from catalog.services.product_manager import ProductManager


def get_catalog_service(db: AsyncSession = Depends(get_read_db)):
    return CatalogService(db)


def get_category_manager(db: AsyncSession = Depends(get_write_db)):
    return CategoryManager(db)


def get_product_manager(db: AsyncSession = Depends(get_write_db)):
    return ProductManager(db)


def get_order_manager(db: AsyncSession = Depends(get_write_db)):
    return OrderManager(db)


def get_media_manager(db: AsyncSession = Depends(get_write_db)):
    return MediaManager(db)
