import enum
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Uuid, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from catalog.config.database import Base


class OrderStatus(str, enum.Enum):
    NEW = "new"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    customer_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    comment = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    total_amount = Column(Integer, nullable=False, default=0)
    status = Column(Enum(OrderStatus, values_callable=lambda e: [s.value for s in e]),
                    nullable=False, default=OrderStatus.NEW)
    idempotency_key = Column(String(255), nullable=True, unique=True)

    __mapper_args__ = {"eager_defaults": True}

    # Relationship with OrderItem
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    qty = Column(Integer, nullable=False)
    price_at_purchase = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_order_items_qty_positive"),
        Index("idx_order_items_order_id", "order_id"),
    )

    # Relationship with Order
    order = relationship("Order", back_populates="items")
