import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from catalog.api.dependencies import get_product_manager
from catalog.core.exceptions import CatalogError
from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from catalog.services.product_manager import ProductManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    product_manager: ProductManager = Depends(get_product_manager),
):
    try:
        logger.info("Attempting to create product.", extra={"slug": product.slug, "category_id": product.category_id})
        return await product_manager.create_product(product.model_dump())
    except CatalogError as e:
        logger.warning("Product creation rejected.", extra={"slug": product.slug, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error creating product.", extra={"slug": product.slug, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.get("", response_model=List[ProductResponse])
async def read_products(
    q: Optional[str] = None,
    category_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    product_manager: ProductManager = Depends(get_product_manager),
):
    """관리자 상품 목록 (최신순)"""
    try:
        products = await product_manager.list_products(q=q, category_id=category_id, is_active=is_active)
        logger.info("Successfully read products.", extra={"count": len(products)})
        return products
    except Exception as e:
        logger.error("Error reading products.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    changes: ProductUpdate,
    product_manager: ProductManager = Depends(get_product_manager),
):
    try:
        fields = changes.model_dump(exclude_unset=True)
        logger.info("Attempting to update product.", extra={"product_id": product_id, "fields": sorted(fields)})
        return await product_manager.update_product(product_id, fields)
    except CatalogError as e:
        logger.warning("Product update rejected.", extra={"product_id": product_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error updating product.", extra={"product_id": product_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    product_manager: ProductManager = Depends(get_product_manager),
):
    try:
        await product_manager.delete_product(product_id)
    except CatalogError as e:
        logger.warning("Product deletion rejected.", extra={"product_id": product_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error deleting product.", extra={"product_id": product_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
