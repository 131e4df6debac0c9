"""상품 쓰기 → desc_product_count 증감 변환.

DB 트리거 대신 ProductManager가 같은 트랜잭션 안에서 명시적으로 호출한다.
카운트는 "활성 상품이 현재 카테고리에 존재하는지"만 반영한다.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import InvalidReferenceError
from catalog.models.category import Category
from catalog.services.count_manager import CountManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductState:
    category_id: int
    is_active: bool

    @classmethod
    def of(cls, product) -> "ProductState":
        return cls(category_id=product.category_id, is_active=bool(product.is_active))


def plan_adjustments(before: Optional[ProductState], after: Optional[ProductState]) -> List[Tuple[int, int]]:
    """(category_id, delta) 목록. 감소가 항상 증가보다 먼저 온다.

    before=None 이면 insert, after=None 이면 delete.
    """
    was_counted = before is not None and before.is_active
    is_counted = after is not None and after.is_active

    if was_counted and is_counted:
        if before.category_id == after.category_id:
            return []
        # 활성 상태로 카테고리 이동
        return [(before.category_id, -1), (after.category_id, +1)]
    if was_counted:
        return [(before.category_id, -1)]
    if is_counted:
        return [(after.category_id, +1)]
    return []


class ProductLifecycleHook:
    def __init__(self, db_session: AsyncSession, counter: Optional[CountManager] = None):
        self.session = db_session
        self.counter = counter or CountManager(db_session)

    async def on_insert(self, after: ProductState):
        await self._apply(plan_adjustments(None, after), event="insert")

    async def on_update(self, before: ProductState, after: ProductState):
        await self._apply(plan_adjustments(before, after), event="update")

    async def on_delete(self, before: ProductState):
        await self._apply(plan_adjustments(before, None), event="delete")

    async def _apply(self, adjustments: List[Tuple[int, int]], event: str):
        for category_id, delta in adjustments:
            category_path = await self.session.scalar(
                select(Category.path).where(Category.id == category_id)
            )
            if category_path is None:
                raise InvalidReferenceError("CATEGORY_NOT_FOUND", "Category not found", category_id=category_id)
            await self.counter.adjust_along_ancestry(category_path, delta)
            logger.debug("Product lifecycle adjustment applied.", extra={
                "event": event, "category_id": category_id, "category_path": category_path, "delta": delta
            })
