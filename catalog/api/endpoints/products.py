import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from catalog.api.dependencies import get_catalog_service
from catalog.core.exceptions import CatalogError
from catalog.schemas.product import ProductPage, ProductResponse
from catalog.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search", response_model=ProductPage)
async def search_products(
    q: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service),
):
    """상품명 검색 (카테고리 서브트리로 좁히기 가능)"""
    try:
        result = await service.search(q=q, category_slug=category, page=page, limit=limit, sort=sort)
        logger.info("Product search completed.", extra={"q": q, "category": category, "total": result["total"]})
        return result
    except Exception as e:
        logger.error("Error searching products.", extra={"q": q, "category": category, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("/{slug}", response_model=ProductResponse)
async def read_product(slug: str, service: CatalogService = Depends(get_catalog_service)):
    """상품 카드 조회"""
    try:
        return await service.get_product(slug)
    except CatalogError as e:
        logger.warning("Product lookup failed.", extra={"slug": slug, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error reading product.", extra={"slug": slug, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
