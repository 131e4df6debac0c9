import logging
from typing import Any, Dict, List, Optional, Union

from opentelemetry import trace
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError, ValidationError
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.services.category_path import (
    SEPARATOR,
    build_path,
    is_descendant_or_self,
    rebase_path,
    validate_category_slug,
)
from catalog.services.count_manager import CountManager

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# NOT NULL 컬럼이라 None으로 덮어쓰지 않는 필드
_FLAG_FIELDS = ("name", "is_active", "featured_only", "sort_order")


def sibling_order(category: Category):
    return (category.sort_order, category.name)


class CategoryManager:
    """카테고리 생성/이동/이름 변경/삭제. path 계산과 변경은 이 클래스만 한다."""

    def __init__(self, db_session: AsyncSession):
        self.session = db_session

    async def create_category(
        self,
        name: str,
        slug: str,
        parent_id: Optional[int] = None,
        is_active: bool = True,
        featured_only: bool = False,
        sort_order: int = 0,
        description: Optional[str] = None,
    ) -> Category:
        """새 카테고리 생성"""
        try:
            validate_category_slug(slug)
            parent_path = None
            if parent_id is not None:
                parent = await self.session.get(Category, parent_id)
                if not parent:
                    logger.warning("Parent category not found during creation.", extra={"parent_id": parent_id, "slug": slug})
                    raise InvalidReferenceError("PARENT_NOT_FOUND", f"Parent category with ID {parent_id} not found", parent_id=parent_id)
                parent_path = parent.path

            path = build_path(slug, parent_path)
            await self._ensure_slug_available(slug)

            new_category = Category(
                name=name,
                slug=slug,
                parent_id=parent_id,
                path=path,
                is_active=is_active,
                featured_only=featured_only,
                sort_order=sort_order,
                description=description,
                desc_product_count=0,
            )
            self.session.add(new_category)
            await self.session.commit()
            logger.info("Category created successfully.", extra={"category_id": new_category.id, "path": path})
            return new_category
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Integrity error creating category.", extra={"slug": slug, "error": str(e)})
            raise ConflictError("DUPLICATE_SLUG", f"Slug '{slug}' already exists", slug=slug)
        except Exception:
            await self.session.rollback()
            raise

    async def update_category(self, category_id: int, changes: Dict[str, Any]) -> Category:
        """이름/플래그 변경, slug 변경, 부모 이동.

        path가 바뀌면 같은 트랜잭션에서 서브트리 path를 다시 쓰고 카운트를 전체 재계산한다.
        """
        with tracer.start_as_current_span("CategoryManager.update_category") as span:
            span.set_attribute("app.category_id", category_id)
            try:
                category = await self._get_for_update(category_id)
                old_path = category.path

                new_slug = changes["slug"] if changes.get("slug") is not None else category.slug
                new_parent_id = changes["parent_id"] if "parent_id" in changes else category.parent_id

                if new_slug != category.slug:
                    validate_category_slug(new_slug)
                    await self._ensure_slug_available(new_slug, exclude_id=category.id)

                parent_path = None
                if new_parent_id is not None:
                    parent = await self.session.get(Category, new_parent_id)
                    if not parent:
                        raise InvalidReferenceError("PARENT_NOT_FOUND", f"Parent category with ID {new_parent_id} not found", parent_id=new_parent_id)
                    # 순환 참조 방지
                    if is_descendant_or_self(parent.path, old_path):
                        raise ValidationError("INVALID_PARENT", "Cannot move a category under itself or its descendant", parent_id=new_parent_id)
                    parent_path = parent.path

                new_path = build_path(new_slug, parent_path)

                for field in _FLAG_FIELDS:
                    if changes.get(field) is not None:
                        setattr(category, field, changes[field])
                if "description" in changes:
                    category.description = changes["description"]
                category.slug = new_slug
                category.parent_id = new_parent_id

                moved = new_path != old_path
                span.set_attribute("app.category.moved", moved)
                if moved:
                    subtree = await self._lock_subtree(old_path)
                    for node in subtree:
                        node.path = rebase_path(node.path, old_path, new_path)
                    # path 변경을 먼저 반영한 뒤 재계산이 새 path를 읽도록 함
                    await self.session.flush()
                    await CountManager(self.session).full_recompute()
                    logger.info("Category subtree moved.", extra={
                        "category_id": category_id, "old_path": old_path, "new_path": new_path, "subtree_size": len(subtree)
                    })

                await self.session.commit()
                logger.info("Category updated successfully.", extra={"category_id": category_id, "fields": sorted(changes)})
                return category
            except IntegrityError as e:
                await self.session.rollback()
                logger.warning("Integrity error updating category.", extra={"category_id": category_id, "error": str(e)})
                raise ConflictError("DUPLICATE_SLUG", "Slug already exists", slug=changes.get("slug"))
            except Exception:
                await self.session.rollback()
                raise

    async def delete_category(self, category_id: int) -> None:
        """자식도 직속 상품도 없는 카테고리만 삭제 (재계산 불필요)"""
        try:
            category = await self._get_for_update(category_id)

            has_children = await self.session.scalar(
                select(Category.id).where(Category.parent_id == category_id).limit(1)
            )
            if has_children is not None:
                raise ConflictError("HAS_CHILDREN", "Category has subcategories", category_id=category_id)

            has_products = await self.session.scalar(
                select(Product.id).where(Product.category_id == category_id).limit(1)
            )
            if has_products is not None:
                raise ConflictError("HAS_PRODUCTS", "Category has products", category_id=category_id)

            await self.session.delete(category)
            await self.session.commit()
            logger.info("Category deleted.", extra={"category_id": category_id, "path": category.path})
        except Exception:
            await self.session.rollback()
            raise

    async def get_category(self, category_id: int) -> Category:
        """카테고리 ID로 카테고리 조회"""
        category = await self.session.get(Category, category_id)
        if not category:
            logger.warning("Category not found.", extra={"category_id": category_id})
            raise NotFoundError("NOT_FOUND", f"Category with ID {category_id} not found", category_id=category_id)
        return category

    async def get_by_slug(self, slug: str, active_only: bool = False) -> Category:
        query = select(Category).where(Category.slug == slug)
        if active_only:
            query = query.where(Category.is_active.is_(True))
        category = await self.session.scalar(query)
        if not category:
            raise NotFoundError("NOT_FOUND", f"Category '{slug}' not found", slug=slug)
        return category

    async def resolve(self, ref: Union[int, str], active_only: bool = False) -> Category:
        """slug 우선, 숫자면 ID로 다시 조회"""
        try:
            return await self.get_by_slug(str(ref), active_only=active_only)
        except NotFoundError:
            if not str(ref).isdigit():
                raise
        category = await self.get_category(int(ref))
        if active_only and not category.is_active:
            raise NotFoundError("NOT_FOUND", f"Category '{ref}' not found", category_id=int(ref))
        return category

    async def list_categories(self) -> List[Category]:
        """모든 카테고리 조회 (최상위 먼저)"""
        query = select(Category).order_by(Category.parent_id.is_not(None), Category.sort_order, Category.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_children(self, parent_ref: Union[int, str]) -> List[Category]:
        """활성 부모의 활성 직속 자식 (sort_order, name 순)"""
        parent = await self.resolve(parent_ref, active_only=True)
        query = (
            select(Category)
            .where(Category.parent_id == parent.id, Category.is_active.is_(True))
            .order_by(Category.sort_order, Category.name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_subcategories(self, category_id: int) -> List[Category]:
        """특정 카테고리의 모든 하위 카테고리 조회"""
        parent = await self.get_category(category_id)
        query = (
            select(Category)
            .where(Category.path.startswith(parent.path + SEPARATOR, autoescape=True))
            .order_by(Category.path)
        )
        result = await self.session.execute(query)
        subcategories = list(result.scalars().all())
        logger.debug("Retrieved subcategories.", extra={"parent_category_id": category_id, "subcategories_count": len(subcategories)})
        return subcategories

    async def get_ancestors(self, category_id: int) -> List[Category]:
        """특정 카테고리의 모든 상위 카테고리 조회 (루트부터)"""
        category = await self.get_category(category_id)
        # path에서 slug 추출, 마지막은 현재 카테고리이므로 제외
        ancestor_slugs = category.path.split(SEPARATOR)[1:-1]
        if not ancestor_slugs:
            return []
        result = await self.session.execute(select(Category).where(Category.slug.in_(ancestor_slugs)))
        by_slug = {c.slug: c for c in result.scalars().all()}
        return [by_slug[s] for s in ancestor_slugs if s in by_slug]

    async def _get_for_update(self, category_id: int) -> Category:
        category = await self.session.scalar(
            select(Category).where(Category.id == category_id).with_for_update()
        )
        if not category:
            raise NotFoundError("NOT_FOUND", f"Category with ID {category_id} not found", category_id=category_id)
        return category

    async def _lock_subtree(self, path: str) -> List[Category]:
        query = (
            select(Category)
            .where(or_(Category.path == path, Category.path.startswith(path + SEPARATOR, autoescape=True)))
            .with_for_update()
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _ensure_slug_available(self, slug: str, exclude_id: Optional[int] = None):
        query = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        if await self.session.scalar(query.limit(1)) is not None:
            logger.warning("Duplicate category slug.", extra={"slug": slug})
            raise ConflictError("DUPLICATE_SLUG", f"Slug '{slug}' already exists", slug=slug)
