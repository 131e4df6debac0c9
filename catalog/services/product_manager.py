import logging
from typing import Any, Dict, List, Optional

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings
from catalog.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError, ValidationError
from catalog.models.category import Category
from catalog.models.order import OrderItem
from catalog.models.product import Product
from catalog.services.category_path import validate_slug
from catalog.services.product_hooks import ProductLifecycleHook, ProductState

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PRODUCT_FIELDS = (
    "name", "slug", "sku", "price", "is_active", "is_featured", "category_id",
    "primary_image_url", "gallery", "doc_url", "doc_meta", "content_html", "specs_html",
)
# NOT NULL 컬럼
_REQUIRED_FIELDS = ("name", "slug", "price", "is_active", "is_featured", "category_id", "gallery")


def normalize_gallery(gallery: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """갤러리를 sort 순으로 정렬 (같은 sort는 입력 순서 유지)"""
    items = [dict(item) for item in (gallery or [])]
    return sorted(items, key=lambda item: item.get("sort") or 0)


class ProductManager:
    """상품 쓰기. 모든 쓰기는 같은 트랜잭션 안에서 카운트 훅을 호출한다."""

    def __init__(self, db_session: AsyncSession, hook: Optional[ProductLifecycleHook] = None):
        self.session = db_session
        self.hook = hook or ProductLifecycleHook(db_session)

    async def create_product(self, data: Dict[str, Any]) -> Product:
        with tracer.start_as_current_span("ProductManager.create_product") as span:
            try:
                values = {field: data.get(field) for field in PRODUCT_FIELDS if field in data}
                values.setdefault("is_active", True)
                values.setdefault("is_featured", False)
                values["gallery"] = normalize_gallery(values.get("gallery"))

                validate_slug(values.get("slug"))
                self._validate_price(values.get("price"))
                await self._ensure_category(values.get("category_id"))
                await self._ensure_unique(values["slug"], values.get("sku"))

                product = Product(**values)
                self.session.add(product)
                await self.session.flush()
                span.set_attribute("app.product_id", product.id)

                await self.hook.on_insert(ProductState.of(product))

                await self.session.commit()
                logger.info("Product created successfully.", extra={
                    "product_id": product.id, "slug": product.slug, "category_id": product.category_id, "is_active": product.is_active
                })
                return product
            except IntegrityError as e:
                await self.session.rollback()
                logger.warning("Integrity error creating product.", extra={"slug": data.get("slug"), "error": str(e)})
                raise ConflictError("DUPLICATE_SLUG", "Product slug or sku already exists", slug=data.get("slug"), sku=data.get("sku"))
            except Exception:
                await self.session.rollback()
                raise

    async def update_product(self, product_id: int, changes: Dict[str, Any]) -> Product:
        with tracer.start_as_current_span("ProductManager.update_product") as span:
            span.set_attribute("app.product_id", product_id)
            try:
                product = await self._get_for_update(product_id)
                before = ProductState.of(product)

                values = {field: changes[field] for field in PRODUCT_FIELDS if field in changes}
                for field in _REQUIRED_FIELDS:
                    if field in values and values[field] is None:
                        values.pop(field)

                if "slug" in values:
                    validate_slug(values["slug"])
                if "price" in values:
                    self._validate_price(values["price"])
                if "category_id" in values and values["category_id"] != product.category_id:
                    await self._ensure_category(values["category_id"])
                if "gallery" in values:
                    values["gallery"] = normalize_gallery(values["gallery"])
                await self._ensure_unique(
                    values.get("slug") if values.get("slug") != product.slug else None,
                    values.get("sku") if values.get("sku") != product.sku else None,
                    exclude_id=product.id,
                )

                for field, value in values.items():
                    setattr(product, field, value)
                await self.session.flush()

                await self.hook.on_update(before, ProductState.of(product))

                await self.session.commit()
                logger.info("Product updated successfully.", extra={"product_id": product_id, "fields": sorted(values)})
                return product
            except IntegrityError as e:
                await self.session.rollback()
                logger.warning("Integrity error updating product.", extra={"product_id": product_id, "error": str(e)})
                raise ConflictError("DUPLICATE_SLUG", "Product slug or sku already exists", product_id=product_id)
            except Exception:
                await self.session.rollback()
                raise

    async def delete_product(self, product_id: int) -> None:
        try:
            product = await self._get_for_update(product_id)
            before = ProductState.of(product)

            in_orders = await self.session.scalar(
                select(OrderItem.id).where(OrderItem.product_id == product_id).limit(1)
            )
            if in_orders is not None:
                raise ConflictError("PRODUCT_IN_ORDERS", "Product is referenced by orders; deactivate it instead", product_id=product_id)

            await self.session.delete(product)
            await self.session.flush()

            await self.hook.on_delete(before)

            await self.session.commit()
            logger.info("Product deleted.", extra={"product_id": product_id, "category_id": before.category_id})
        except Exception:
            await self.session.rollback()
            raise

    async def get_product(self, product_id: int) -> Product:
        product = await self.session.get(Product, product_id)
        if not product:
            raise NotFoundError("NOT_FOUND", f"Product with ID {product_id} not found", product_id=product_id)
        return product

    async def list_products(
        self,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[Product]:
        """관리자용 상품 목록 (최신순)"""
        query = select(Product)
        if q:
            query = query.where(Product.name.icontains(q, autoescape=True))
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if is_active is not None:
            query = query.where(Product.is_active.is_(is_active))
        query = query.order_by(Product.id.desc()).limit(settings.ADMIN_PRODUCT_LIST_LIMIT)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _get_for_update(self, product_id: int) -> Product:
        product = await self.session.scalar(
            select(Product).where(Product.id == product_id).with_for_update()
        )
        if not product:
            raise NotFoundError("NOT_FOUND", f"Product with ID {product_id} not found", product_id=product_id)
        return product

    async def _ensure_category(self, category_id: Optional[int]):
        if category_id is None or await self.session.get(Category, category_id) is None:
            raise InvalidReferenceError("CATEGORY_NOT_FOUND", f"Category with ID {category_id} not found", category_id=category_id)

    async def _ensure_unique(self, slug: Optional[str], sku: Optional[str], exclude_id: Optional[int] = None):
        if slug is not None:
            query = select(Product.id).where(Product.slug == slug)
            if exclude_id is not None:
                query = query.where(Product.id != exclude_id)
            if await self.session.scalar(query.limit(1)) is not None:
                raise ConflictError("DUPLICATE_SLUG", f"Product slug '{slug}' already exists", slug=slug)
        if sku is not None:
            query = select(Product.id).where(Product.sku == sku)
            if exclude_id is not None:
                query = query.where(Product.id != exclude_id)
            if await self.session.scalar(query.limit(1)) is not None:
                raise ConflictError("DUPLICATE_SKU", f"Product sku '{sku}' already exists", sku=sku)

    @staticmethod
    def _validate_price(price):
        if isinstance(price, bool) or not isinstance(price, int) or price < 0:
            raise ValidationError("INVALID_PRICE", "Price must be a non-negative integer in minor units", price=price)
