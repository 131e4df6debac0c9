import asyncio
import logging
from collections import defaultdict
from typing import Dict, List

from opentelemetry import trace
from sqlalchemy import case, func, inspect, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.services.category_path import ancestor_paths

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# InnoDB: lock wait timeout은 해당 문장만 롤백, deadlock(1213)은 트랜잭션 전체를 롤백
LOCK_WAIT_TIMEOUT = 1205


def is_lock_wait_timeout(error: OperationalError) -> bool:
    args = getattr(error.orig, "args", None) or ()
    return bool(args) and args[0] == LOCK_WAIT_TIMEOUT


class CountManager:
    """categories.desc_product_count의 유일한 writer.

    - adjust_along_ancestry: 상품 이벤트마다 조상 체인에 +1/-1 (O(depth))
    - full_recompute: 트리 구조가 바뀌었을 때 전체 재계산 (정합성 기준)

    커밋은 호출자의 트랜잭션에 맡긴다.
    """

    def __init__(self, db_session: AsyncSession):
        self.session = db_session
        self.max_retries = settings.COUNT_ADJUST_MAX_RETRIES
        self.retry_delay = settings.COUNT_ADJUST_RETRY_DELAY

    async def adjust_along_ancestry(self, category_path: str, delta: int) -> int:
        """category_path 자신과 모든 조상의 카운트를 delta만큼 조정 (0 미만으로 내려가지 않음)

        lock wait timeout만 savepoint 안에서 재시도한다. deadlock 등 나머지는 그대로 올려서
        상품 쓰기 전체가 롤백되게 한다.
        """
        if delta == 0:
            return 0

        paths = ancestor_paths(category_path)
        new_count = Category.desc_product_count + delta
        stmt = (
            update(Category)
            .where(Category.path.in_(paths))
            .values(desc_product_count=case((new_count < 0, 0), else_=new_count))
            .execution_options(synchronize_session=False)
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                # 실패한 시도만 되돌리도록 savepoint 안에서 실행
                async with self.session.begin_nested():
                    result = await self.session.execute(stmt)
                break
            except OperationalError as e:
                if not is_lock_wait_timeout(e) or attempt > self.max_retries:
                    logger.error("Giving up adjusting descendant product counts.", extra={
                        "category_path": category_path, "delta": delta, "attempts": attempt, "error": str(e)
                    }, exc_info=True)
                    raise
                logger.warning("Retrying descendant product count adjustment.", extra={
                    "category_path": category_path, "delta": delta, "attempt": attempt, "error": str(e)
                })
                await asyncio.sleep(self.retry_delay * attempt)

        await self._refresh_loaded(paths)
        logger.debug("Adjusted descendant product counts.", extra={
            "category_path": category_path, "delta": delta, "rows": result.rowcount, "attempt": attempt
        })
        return result.rowcount

    async def _refresh_loaded(self, paths: List[str]):
        """세션에 이미 올라온 카테고리의 desc_product_count를 DB 값으로 갱신"""
        paths = set(paths)
        # 만료된 속성을 건드리면 lazy load가 일어나므로 state.dict만 본다
        loaded = [
            obj for obj in list(self.session.identity_map.values())
            if isinstance(obj, Category) and inspect(obj).persistent and inspect(obj).dict.get("path") in paths
        ]
        for category in loaded:
            await self.session.refresh(category, ["desc_product_count"])

    async def compute_counts(self) -> Dict[int, int]:
        """현재 카테고리/상품 상태로부터 계산한 카테고리별 하위 활성 상품 수 (쓰기 없음)"""
        categories = (await self.session.execute(select(Category.id, Category.path))).all()
        direct_counts = await self._direct_counts_by_path()
        return self._accumulate(categories, direct_counts)

    async def full_recompute(self) -> Dict[int, int]:
        """모든 카테고리의 desc_product_count를 처음부터 다시 계산"""
        with tracer.start_as_current_span("CountManager.full_recompute") as span:
            # 카테고리 행을 먼저 잠가서 동시 상품 쓰기의 증감과 섞이지 않도록 함
            result = await self.session.execute(
                select(Category)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            categories = result.scalars().all()
            direct_counts = await self._direct_counts_by_path(lock=True)
            counts = self._accumulate([(c.id, c.path) for c in categories], direct_counts)

            changed = 0
            for category in categories:
                if category.desc_product_count != counts[category.id]:
                    category.desc_product_count = counts[category.id]
                    changed += 1
            await self.session.flush()

            span.set_attribute("app.categories.total", len(categories))
            span.set_attribute("app.categories.changed", changed)
            logger.info("Recomputed descendant product counts.", extra={
                "categories": len(categories), "changed": changed
            })
            return counts

    async def _direct_counts_by_path(self, lock: bool = False) -> Dict[str, int]:
        result = await self.session.execute(self.direct_counts_query(lock=lock))
        return {path: count for path, count in result.all()}

    @staticmethod
    def direct_counts_query(lock: bool = False):
        """경로별 직속 활성 상품 수.

        lock=True면 공유 잠금 읽기로 실행해 REPEATABLE READ 스냅샷이 아닌
        최신 커밋 상태를 센다.
        """
        query = (
            select(Category.path, func.count(Product.id))
            .join(Product, Product.category_id == Category.id)
            .where(Product.is_active.is_(True))
            .group_by(Category.path)
        )
        if lock:
            query = query.with_for_update(read=True)
        return query

    @staticmethod
    def _accumulate(categories, direct_counts: Dict[str, int]) -> Dict[int, int]:
        totals = defaultdict(int)
        for path, count in direct_counts.items():
            for ancestor in ancestor_paths(path):
                totals[ancestor] += count
        return {category_id: totals.get(path, 0) for category_id, path in categories}
