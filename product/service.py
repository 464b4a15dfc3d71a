from datetime import datetime
import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from shared_utils.errors import NotFoundError, ConflictError
from orders.models import Order
from .models import Product

logger = logging.getLogger(__name__)

DELETE_BLOCKED_MESSAGE = "Cannot delete product that has existing orders. Consider deactivating it instead."


class ProductService:
    """Catalog rules that go beyond plain CRUD"""

    @staticmethod
    def get_product(db: Session, retailer_id: str, product_id: str) -> Product:
        product = (db.query(Product)
                   .filter(Product.id == product_id, Product.retailer_id == retailer_id)
                   .one_or_none())
        if product is None:
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    def delete_product(db: Session, retailer_id: str, product_id: str) -> None:
        """Delete a product unless an order still references it"""
        product = ProductService.get_product(db, retailer_id, product_id)

        has_orders = db.query(Order.id).filter(Order.product_id == product.id).first() is not None
        if has_orders:
            raise ConflictError(DELETE_BLOCKED_MESSAGE)

        try:
            db.delete(product)
            db.commit()
        except IntegrityError:
            # An order referencing the product landed after our check
            db.rollback()
            raise ConflictError(DELETE_BLOCKED_MESSAGE)
        except Exception:
            db.rollback()
            raise

        logger.info(f"Product {product_id} deleted", extra={"retailer_id": retailer_id, "product_id": product_id})

    @staticmethod
    def toggle_status(db: Session, retailer_id: str, product_id: str) -> Product:
        product = ProductService.get_product(db, retailer_id, product_id)
        product.is_active = not product.is_active
        product.updated_at = datetime.utcnow()
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(product)
        logger.info(f"Product {product_id} {'activated' if product.is_active else 'deactivated'}",
                    extra={"retailer_id": retailer_id, "product_id": product_id})
        return product
