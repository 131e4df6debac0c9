import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.core.exceptions import CatalogError, InvalidReferenceError, NotFoundError, ValidationError
from catalog.models.order import Order, OrderItem, OrderStatus
from catalog.models.product import Product

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CONTACT_FIELDS = ("customer_name", "email", "phone", "comment", "address")


def parse_product_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        product_id = int(value)
    except (TypeError, ValueError):
        return None
    return product_id if product_id > 0 else None


def parse_qty(value: Any) -> Optional[int]:
    """양의 정수 수량만 허용 ("2"는 허용, 1.5/0/-1/True는 불가)"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    elif not isinstance(value, int):
        return None
    return value if value > 0 else None


class OrderManager:
    """주문 생성 (가격 스냅샷 + 멱등성 키). orders/order_items의 유일한 writer."""

    def __init__(self, db_session: AsyncSession):
        self.session = db_session

    async def place_order(
        self,
        items: List[Dict[str, Any]],
        idempotency_key: Optional[str] = None,
        **contact: Any,
    ) -> Dict[str, Any]:
        """새로운 주문을 생성합니다. 같은 멱등성 키는 기존 주문 ID를 duplicate로 반환"""
        with tracer.start_as_current_span("OrderManager.place_order") as span:
            span.set_attribute("app.item_count", len(items or []))
            try:
                if not items:
                    raise ValidationError("ITEMS_REQUIRED", "At least one item is required")

                # Step 1: 멱등성 키 확인 (재검증 없이 기존 주문 반환)
                if idempotency_key:
                    existing_id = await self._find_by_idempotency_key(idempotency_key)
                    if existing_id is not None:
                        span.add_event("DuplicateIdempotencyKey")
                        logger.info("Duplicate order request.", extra={"order_id": str(existing_id), "idempotency_key": idempotency_key})
                        return {"order_id": existing_id, "status": "duplicate"}

                # Step 2: 현재 가격/활성 여부를 한 번에 조회
                product_ids = {pid for pid in (parse_product_id(it.get("product_id")) for it in items) if pid}
                products = {}
                if product_ids:
                    result = await self.session.execute(
                        select(Product.id, Product.price, Product.is_active).where(Product.id.in_(product_ids))
                    )
                    products = {row.id: row for row in result.all()}

                # Step 3: 검증 및 합계 계산 (클라이언트 가격은 사용하지 않음)
                lines = []
                total_amount = 0
                for item in items:
                    product_id = parse_product_id(item.get("product_id"))
                    product = products.get(product_id)
                    if product is None or not product.is_active:
                        raise InvalidReferenceError("INVALID_PRODUCT", "Unknown or inactive product", product_id=item.get("product_id"))
                    qty = parse_qty(item.get("qty"))
                    if qty is None:
                        raise ValidationError("INVALID_QTY", "Quantity must be a positive integer", product_id=item.get("product_id"))
                    total_amount += product.price * qty
                    lines.append((product_id, qty, product.price))
                span.set_attribute("app.order.total_amount", total_amount)

                # Step 4: 헤더 → 라인 순서로 저장 (한 트랜잭션)
                order = Order(
                    total_amount=total_amount,
                    status=OrderStatus.NEW,
                    idempotency_key=idempotency_key or None,
                    **{field: contact.get(field) for field in CONTACT_FIELDS},
                )
                self.session.add(order)
                await self.session.flush()

                for product_id, qty, price in lines:
                    self.session.add(OrderItem(
                        order_id=order.id,
                        product_id=product_id,
                        qty=qty,
                        price_at_purchase=price,
                    ))
                await self.session.commit()

                span.set_attribute("app.order_id", str(order.id))
                span.set_status(Status(StatusCode.OK))
                logger.info("Order placed successfully.", extra={
                    "order_id": str(order.id), "total_amount": total_amount, "items_count": len(lines)
                })
                return {"order_id": order.id, "total_amount": total_amount}
            except IntegrityError as e:
                await self.session.rollback()
                # 같은 키로 동시에 들어온 요청: 먼저 커밋된 주문을 반환
                if idempotency_key:
                    existing_id = await self._find_by_idempotency_key(idempotency_key)
                    if existing_id is not None:
                        logger.info("Concurrent duplicate order request.", extra={"order_id": str(existing_id), "idempotency_key": idempotency_key})
                        return {"order_id": existing_id, "status": "duplicate"}
                logger.error("Integrity error placing order.", extra={"error": str(e)}, exc_info=True)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "IntegrityError"))
                raise
            except CatalogError as e:
                await self.session.rollback()
                logger.warning("Order rejected.", extra={"error": e.code, "details": e.details})
                span.set_attribute("app.validation.error", e.code)
                raise
            except Exception as e:
                await self.session.rollback()
                logger.error("Error placing order.", extra={"error": str(e)}, exc_info=True)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

    async def get_order(self, order_id: Union[uuid.UUID, str]) -> Order:
        order_uuid = self._as_uuid(order_id)
        order = None
        if order_uuid is not None:
            order = await self.session.scalar(
                select(Order)
                .options(selectinload(Order.items))
                .where(Order.id == order_uuid)
                .execution_options(populate_existing=True)
            )
        if not order:
            logger.warning("Order not found.", extra={"order_id": str(order_id)})
            raise NotFoundError("NOT_FOUND", f"Order {order_id} not found", order_id=str(order_id))
        return order

    async def update_order_status(self, order_id: Union[uuid.UUID, str], status: OrderStatus) -> Order:
        """주문에서 유일하게 변경 가능한 필드"""
        try:
            order = await self.get_order(order_id)
            previous = order.status
            order.status = status
            await self.session.commit()
            logger.info("Order status updated.", extra={
                "order_id": str(order.id), "previous_status": previous, "new_status": status
            })
            return order
        except Exception:
            await self.session.rollback()
            raise

    async def _find_by_idempotency_key(self, idempotency_key: str) -> Optional[uuid.UUID]:
        return await self.session.scalar(
            select(Order.id).where(Order.idempotency_key == idempotency_key)
        )

    @staticmethod
    def _as_uuid(value) -> Optional[uuid.UUID]:
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value))
        except ValueError:
            return None
