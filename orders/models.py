from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from config.database import Base
from datetime import datetime
import enum
import uuid


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUSES = tuple(s.value for s in OrderStatus)

# Only orders in these states may be deleted
DELETABLE_STATUSES = (OrderStatus.PENDING.value, OrderStatus.CANCELLED.value)


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')",
            name="ck_orders_status",
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    retailer_id = Column(String(36), ForeignKey("retailers.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)

    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    quantity = Column(Integer, nullable=False)
    # Snapshotted at creation, never recomputed
    unit_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)

    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    retailer = relationship("Retailer", back_populates="orders")
    product = relationship("Product", back_populates="orders")

    def __repr__(self):
        return f"<Order(id={self.id}, status={self.status}, total={self.total_amount})>"
