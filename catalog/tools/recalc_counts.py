"""desc_product_count 재계산 도구.

    python -m catalog.tools.recalc_counts            # 전체 재계산
    python -m catalog.tools.recalc_counts --dry-run  # 차이만 출력
"""
import argparse
import asyncio
import logging
import sys
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.database import WriteSessionLocal, dispose_engines
from catalog.config.logging import setup_logging
from catalog.core.config import settings
from catalog.models.category import Category
from catalog.services.count_manager import CountManager

logger = logging.getLogger(__name__)


async def recalc_all_counts(session: AsyncSession) -> Dict[int, int]:
    """모든 카테고리 카운트를 현재 상품 상태로 다시 계산하고 커밋"""
    try:
        counts = await CountManager(session).full_recompute()
        await session.commit()
        logger.info("Category counts recalculated.", extra={"categories": len(counts)})
        return counts
    except Exception:
        await session.rollback()
        raise


async def find_drift(session: AsyncSession) -> Dict[int, Dict[str, int]]:
    """저장된 값과 계산 값이 다른 카테고리 {id: {stored, expected}}"""
    expected = await CountManager(session).compute_counts()
    result = await session.execute(select(Category.id, Category.desc_product_count))
    return {
        row.id: {"stored": row.desc_product_count, "expected": expected.get(row.id, 0)}
        for row in result.all()
        if row.desc_product_count != expected.get(row.id, 0)
    }


async def run(dry_run: bool = False) -> int:
    try:
        async with WriteSessionLocal() as session:
            drift = await find_drift(session)
            for category_id, values in sorted(drift.items()):
                print(f"category {category_id}: stored={values['stored']} expected={values['expected']}")
            if dry_run:
                print(f"{len(drift)} categories out of sync")
                return 1 if drift else 0
            counts = await recalc_all_counts(session)
            print(f"Recalculated {len(counts)} categories ({len(drift)} corrected)")
            return 0
    finally:
        await dispose_engines()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Recalculate desc_product_count for every category")
    parser.add_argument("--dry-run", action="store_true", help="report drift without writing")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(run(dry_run=args.dry_run)))


if __name__ == "__main__":
    main()
