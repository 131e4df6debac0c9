import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from catalog.api.dependencies import get_category_manager
from catalog.core.exceptions import CatalogError
from catalog.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from catalog.services.category_manager import CategoryManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category: CategoryCreate,
    category_manager: CategoryManager = Depends(get_category_manager),
):
    """새 카테고리 생성"""
    try:
        logger.info("Attempting to create category.", extra={"slug": category.slug, "parent_id": category.parent_id})
        created = await category_manager.create_category(**category.model_dump())
        logger.info("Successfully created category.", extra={"category_id": created.id, "path": created.path})
        return created
    except CatalogError as e:
        logger.warning("Category creation rejected.", extra={"slug": category.slug, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error creating category.", extra={"slug": category.slug, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("", response_model=List[CategoryResponse])
async def read_categories(category_manager: CategoryManager = Depends(get_category_manager)):
    """모든 카테고리 조회 (비활성 포함)"""
    try:
        categories = await category_manager.list_categories()
        logger.info("Successfully read categories.", extra={"count": len(categories)})
        return categories
    except Exception as e:
        logger.error("Error reading categories.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    changes: CategoryUpdate,
    category_manager: CategoryManager = Depends(get_category_manager),
):
    """카테고리 수정 (이름 변경, slug 변경, 이동)"""
    try:
        fields = changes.model_dump(exclude_unset=True)
        logger.info("Attempting to update category.", extra={"category_id": category_id, "fields": sorted(fields)})
        return await category_manager.update_category(category_id, fields)
    except CatalogError as e:
        logger.warning("Category update rejected.", extra={"category_id": category_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error updating category.", extra={"category_id": category_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    category_manager: CategoryManager = Depends(get_category_manager),
):
    """카테고리 삭제 (자식/상품이 없을 때만)"""
    try:
        await category_manager.delete_category(category_id)
    except CatalogError as e:
        logger.warning("Category deletion rejected.", extra={"category_id": category_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error deleting category.", extra={"category_id": category_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
