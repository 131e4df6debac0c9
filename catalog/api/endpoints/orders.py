import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from catalog.api.dependencies import get_order_manager
from catalog.core.exceptions import CatalogError
from catalog.schemas.order import OrderCreate, OrderCreateResponse
from catalog.services.order_manager import OrderManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OrderCreateResponse, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_order(
    order: OrderCreate,
    response: Response,
    order_manager: OrderManager = Depends(get_order_manager),
):
    """주문 생성. 같은 idempotency_key 재요청은 200 + duplicate"""
    try:
        logger.info("Attempting to create order.", extra={
            "items_count": len(order.items), "idempotency_key": order.idempotency_key
        })
        result = await order_manager.place_order(
            items=[item.model_dump() for item in order.items],
            idempotency_key=order.idempotency_key,
            **order.model_dump(exclude={"items", "idempotency_key"}),
        )
        if result.get("status") == "duplicate":
            response.status_code = status.HTTP_200_OK
        return result
    except CatalogError as e:
        logger.warning("Order creation rejected.", extra={"error": e.code, "details": e.details})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error creating order.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
