import logging

from fastapi import APIRouter, Depends, HTTPException

from catalog.api.dependencies import get_order_manager
from catalog.core.exceptions import CatalogError
from catalog.schemas.order import OrderResponse, OrderStatusUpdate
from catalog.services.order_manager import OrderManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: str, order_manager: OrderManager = Depends(get_order_manager)):
    """주문 상세 (라인 포함)"""
    try:
        return await order_manager.get_order(order_id)
    except CatalogError as e:
        logger.warning("Order lookup failed.", extra={"order_id": order_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error reading order.", extra={"order_id": order_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    order_manager: OrderManager = Depends(get_order_manager),
):
    """주문 상태 변경"""
    try:
        return await order_manager.update_order_status(order_id, payload.status)
    except CatalogError as e:
        logger.warning("Order status update rejected.", extra={"order_id": order_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error updating order status.", extra={"order_id": order_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
