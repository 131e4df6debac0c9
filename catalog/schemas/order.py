import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from catalog.models.order import OrderStatus


class OrderItemCreate(BaseModel):
    # 검증은 OrderManager에서 (INVALID_PRODUCT / INVALID_QTY)
    product_id: Any = None
    qty: Any = None


class OrderCreate(BaseModel):
    idempotency_key: Optional[str] = None
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    comment: Optional[str] = None
    address: Optional[str] = None
    items: List[OrderItemCreate] = []


class OrderCreateResponse(BaseModel):
    order_id: uuid.UUID
    total_amount: Optional[int] = None
    status: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    qty: int
    price_at_purchase: int

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: uuid.UUID
    created_at: Optional[datetime] = None
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    comment: Optional[str] = None
    address: Optional[str] = None
    total_amount: int
    status: OrderStatus
    idempotency_key: Optional[str] = None
    items: List[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)
