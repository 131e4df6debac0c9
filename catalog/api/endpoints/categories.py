import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from catalog.api.dependencies import get_catalog_service
from catalog.core.exceptions import CatalogError
from catalog.schemas.category import CategoryResponse, CategoryTreeNode
from catalog.schemas.product import ProductPage
from catalog.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/tree", response_model=List[CategoryTreeNode])
async def read_category_tree(service: CatalogService = Depends(get_catalog_service)):
    """활성 카테고리 트리 조회"""
    try:
        tree = await service.get_tree()
        logger.info("Successfully read category tree.", extra={"roots_count": len(tree)})
        return tree
    except Exception as e:
        logger.error("Error reading category tree.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("/{slug}", response_model=CategoryResponse)
async def read_category(slug: str, service: CatalogService = Depends(get_catalog_service)):
    """slug로 활성 카테고리 조회"""
    try:
        return await service.get_category(slug)
    except CatalogError as e:
        logger.warning("Category lookup failed.", extra={"slug": slug, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error reading category.", extra={"slug": slug, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("/{parent}/children", response_model=List[CategoryResponse])
async def read_children(parent: str, service: CatalogService = Depends(get_catalog_service)):
    """직속 하위 카테고리 조회 (slug 또는 ID)"""
    try:
        children = await service.get_children(parent)
        logger.info("Successfully read child categories.", extra={"parent": parent, "count": len(children)})
        return children
    except CatalogError as e:
        logger.warning("Parent category not found for children.", extra={"parent": parent, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error reading child categories.", extra={"parent": parent, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("/{slug}/products", response_model=ProductPage)
async def read_category_products(
    slug: str,
    page: int = 1,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    service: CatalogService = Depends(get_catalog_service),
):
    """카테고리 서브트리의 상품 목록"""
    try:
        result = await service.list_category_products(slug, page=page, limit=limit, sort=sort)
        logger.info("Successfully read category products.", extra={
            "slug": slug, "page": result["page"], "total": result["total"]
        })
        return result
    except CatalogError as e:
        logger.warning("Category products lookup failed.", extra={"slug": slug, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error reading category products.", extra={"slug": slug, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
