import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.database import get_write_db
from catalog.tools.recalc_counts import recalc_all_counts

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/recalc-counts")
async def recalc_counts(db: AsyncSession = Depends(get_write_db)):
    """desc_product_count 전체 재계산"""
    try:
        counts = await recalc_all_counts(db)
        return {"status": "ok", "categories": len(counts), "counts": counts}
    except Exception as e:
        logger.error("Error recalculating category counts.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
