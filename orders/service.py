"""
Service layer for the order lifecycle and the stock it reserves
"""
from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy.orm import Session, joinedload

from shared_utils.errors import ApiError, NotFoundError, ConflictError, InsufficientStockError
from product.models import Product
from .models import Order, OrderStatus, ORDER_STATUSES, DELETABLE_STATUSES
from .schema import OrderCreate, OrderStatusUpdate
from .stats import to_money, CENT

logger = logging.getLogger(__name__)

# Status changes are deliberately unconstrained: any status may follow any
# other, including reopening a delivered order as pending.
STATUS_TRANSITIONS = {status: frozenset(ORDER_STATUSES) for status in ORDER_STATUSES}


def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, frozenset())


class OrderService:
    """Business logic for creating, updating and deleting orders"""

    @staticmethod
    def get_order(db: Session, retailer_id: str, order_id: str) -> Order:
        order = (db.query(Order)
                 .options(joinedload(Order.product))
                 .filter(Order.id == order_id, Order.retailer_id == retailer_id)
                 .one_or_none())
        if order is None:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def create_order(db: Session, retailer_id: str, payload: OrderCreate) -> Order:
        """
        Create an order and reserve its stock in one transaction

        The stock decrement is a single guarded UPDATE
        (stock = stock - qty WHERE stock >= qty); if no row matches, the
        order insert is rolled back with it.

        Args:
            db: Database session
            retailer_id: Calling retailer
            payload: Validated order request

        Returns:
            The persisted order with its product loaded

        Raises:
            NotFoundError: product missing, inactive or owned by another retailer
            InsufficientStockError: quantity exceeds available stock
        """
        product_id = str(payload.product_id)
        quantity = payload.quantity

        product = (db.query(Product)
                   .filter(Product.id == product_id,
                           Product.retailer_id == retailer_id,
                           Product.is_active.is_(True))
                   .one_or_none())
        if product is None:
            raise NotFoundError("Product not found or not available")

        if quantity > product.stock:
            raise InsufficientStockError(available=product.stock, requested=quantity)

        # Snapshot pricing: the order keeps these even if the product price changes
        unit_price: Decimal = to_money(product.price)
        total_amount: Decimal = (unit_price * quantity).quantize(CENT)

        try:
            reserved = (db.query(Product)
                        .filter(Product.id == product_id,
                                Product.retailer_id == retailer_id,
                                Product.is_active.is_(True),
                                Product.stock >= quantity)
                        .update({Product.stock: Product.stock - quantity,
                                 Product.updated_at: datetime.utcnow()},
                                synchronize_session=False))
            if reserved == 0:
                # Another order took the stock between our read and the update
                db.rollback()
                available = db.query(Product.stock).filter(Product.id == product_id).scalar() or 0
                raise InsufficientStockError(available=available, requested=quantity)

            order = Order(
                retailer_id=retailer_id,
                product_id=product_id,
                customer_name=payload.customer_name,
                customer_email=payload.customer_email,
                customer_phone=payload.customer_phone,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=total_amount,
                status=OrderStatus.PENDING.value,
                notes=payload.notes,
            )
            db.add(order)
            db.commit()
        except ApiError:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Order creation rolled back for product {product_id}: {e}",
                         extra={"retailer_id": retailer_id, "product_id": product_id})
            raise

        db.refresh(order)
        logger.info(f"Order {order.id} created: {quantity} x {product_id} = {total_amount}",
                    extra={"retailer_id": retailer_id, "order_id": order.id, "product_id": product_id})
        return order

    @staticmethod
    def update_order_status(db: Session, retailer_id: str, order_id: str, payload: OrderStatusUpdate) -> Order:
        order = OrderService.get_order(db, retailer_id, order_id)
        new_status = payload.status.value

        if not can_transition(order.status, new_status):
            raise ConflictError(f"Cannot change order status from '{order.status}' to '{new_status}'")

        previous = order.status
        order.status = new_status
        # notes: omitted leaves them alone, explicit null clears them
        if "notes" in payload.model_fields_set:
            order.notes = payload.notes

        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(order)

        logger.info(f"Order {order.id} status {previous} -> {new_status}",
                    extra={"retailer_id": retailer_id, "order_id": order.id})
        return order

    @staticmethod
    def delete_order(db: Session, retailer_id: str, order_id: str) -> int:
        """
        Delete a pending or cancelled order

        Deleting a pending order hands its quantity back to the product. The
        delete is guarded on the status we checked, and the restore commits
        together with it.

        Returns:
            Quantity restored to stock (0 for cancelled orders)
        """
        order = OrderService.get_order(db, retailer_id, order_id)

        if order.status not in DELETABLE_STATUSES:
            raise ConflictError("Only pending or cancelled orders can be deleted")

        status = order.status
        product_id = order.product_id
        quantity = order.quantity
        restored = 0
        db.expunge(order)

        try:
            deleted = (db.query(Order)
                       .filter(Order.id == order_id,
                               Order.retailer_id == retailer_id,
                               Order.status == status)
                       .delete(synchronize_session=False))
            if deleted == 0:
                db.rollback()
                raise ConflictError("Order was modified while being deleted. Please retry.")

            if status == OrderStatus.PENDING.value:
                (db.query(Product)
                 .filter(Product.id == product_id)
                 .update({Product.stock: Product.stock + quantity,
                          Product.updated_at: datetime.utcnow()},
                         synchronize_session=False))
                restored = quantity

            db.commit()
        except ApiError:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Order deletion rolled back for {order_id}: {e}",
                         extra={"retailer_id": retailer_id, "order_id": order_id})
            raise

        if restored:
            logger.info(f"Restored {restored} units to product {product_id} from deleted order {order_id}",
                        extra={"retailer_id": retailer_id, "order_id": order_id, "product_id": product_id})
        logger.info(f"Order {order_id} deleted", extra={"retailer_id": retailer_id, "order_id": order_id})
        return restored
