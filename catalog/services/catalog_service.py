import logging
import math
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings
from catalog.core.exceptions import NotFoundError
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.services.category_manager import CategoryManager, sibling_order
from catalog.services.category_path import SEPARATOR

logger = logging.getLogger(__name__)

DEFAULT_SORT = "new"
SORT_OPTIONS = {
    "price_asc": (Product.price.asc(), Product.id.desc()),
    "price_desc": (Product.price.desc(), Product.id.desc()),
    "name_asc": (Product.name.asc(), Product.id.desc()),
    "name_desc": (Product.name.desc(), Product.id.desc()),
    "new": (Product.id.desc(),),
}


def normalize_paging(page: Optional[int], limit: Optional[int]):
    """page는 1부터, limit은 [1, MAX_PAGE_LIMIT]로 보정"""
    page = max(1, page or 1)
    if limit is None:
        limit = settings.DEFAULT_PAGE_LIMIT
    limit = min(max(1, limit), settings.MAX_PAGE_LIMIT)
    return page, limit


def subtree_condition(path: str):
    return or_(Category.path == path, Category.path.startswith(path + SEPARATOR, autoescape=True))


class CatalogService:
    """읽기 전용: 트리, 서브트리 상품 목록, 검색, 상품 카드"""

    def __init__(self, db_session: AsyncSession):
        self.session = db_session
        self.categories = CategoryManager(db_session)

    async def get_tree(self) -> List[Dict[str, Any]]:
        """활성 카테고리 forest. 부모가 없거나 비활성이면 루트로 올린다."""
        result = await self.session.execute(
            select(Category).where(Category.is_active.is_(True)).execution_options(populate_existing=True)
        )
        categories = list(result.scalars().all())

        nodes = {c.id: {"category": c, "children": []} for c in categories}
        roots = []
        for category in categories:
            parent = nodes.get(category.parent_id)
            if parent is not None and category.parent_id != category.id:
                parent["children"].append(nodes[category.id])
            else:
                roots.append(nodes[category.id])

        tree = self._render(roots)
        logger.debug("Category tree assembled.", extra={"categories": len(categories), "roots": len(roots)})
        return tree

    def _render(self, nodes) -> List[Dict[str, Any]]:
        ordered = sorted(nodes, key=lambda node: sibling_order(node["category"]))
        return [
            {
                "id": node["category"].id,
                "name": node["category"].name,
                "slug": node["category"].slug,
                "path": node["category"].path,
                "parent_id": node["category"].parent_id,
                "featured_only": node["category"].featured_only,
                "desc_product_count": node["category"].desc_product_count,
                "sort_order": node["category"].sort_order,
                "description": node["category"].description,
                "children": self._render(node["children"]),
            }
            for node in ordered
        ]

    async def get_children(self, parent_ref: Union[int, str]) -> List[Category]:
        return await self.categories.get_children(parent_ref)

    async def get_category(self, slug: str) -> Category:
        return await self.categories.get_by_slug(slug, active_only=True)

    async def list_category_products(
        self,
        slug: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> Dict[str, Any]:
        """카테고리 서브트리의 활성 상품 (featured_only면 추천 상품만)"""
        category = await self.categories.get_by_slug(slug, active_only=True)
        conditions = [subtree_condition(category.path)]
        if category.featured_only:
            conditions.append(Product.is_featured.is_(True))
        return await self._paginate(conditions, page, limit, sort)

    async def search(
        self,
        q: Optional[str] = None,
        category_slug: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> Dict[str, Any]:
        conditions = []
        if q:
            conditions.append(Product.name.icontains(q, autoescape=True))
        if category_slug:
            try:
                category = await self.categories.get_by_slug(category_slug, active_only=True)
            except NotFoundError:
                # 없는 카테고리는 에러 대신 빈 결과
                page, limit = normalize_paging(page, limit)
                return {"items": [], "page": page, "limit": limit, "total": 0, "pages": 0}
            conditions.append(subtree_condition(category.path))
        return await self._paginate(conditions, page, limit, sort)

    async def get_product(self, slug: str) -> Product:
        product = await self.session.scalar(
            select(Product).where(Product.slug == slug, Product.is_active.is_(True))
        )
        if not product:
            raise NotFoundError("NOT_FOUND", f"Product '{slug}' not found", slug=slug)
        return product

    async def _paginate(self, conditions, page, limit, sort) -> Dict[str, Any]:
        page, limit = normalize_paging(page, limit)
        order_by = SORT_OPTIONS.get(sort or DEFAULT_SORT, SORT_OPTIONS[DEFAULT_SORT])
        conditions = [Product.is_active.is_(True), *conditions]

        total = await self.session.scalar(
            select(func.count(Product.id))
            .join(Category, Product.category_id == Category.id)
            .where(*conditions)
        )
        result = await self.session.execute(
            select(Product)
            .join(Category, Product.category_id == Category.id)
            .where(*conditions)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list(result.scalars().all())
        return {
            "items": items,
            "page": page,
            "limit": limit,
            "total": total or 0,
            "pages": math.ceil((total or 0) / limit),
        }
