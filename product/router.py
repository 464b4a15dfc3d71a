from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import orm
from typing import Optional
from uuid import UUID
from datetime import datetime
import logging

from config.database import get_db
from models import Retailer
from shared_utils.auth import get_current_retailer
from shared_utils.errors import InputValidationError
from shared_utils.responses import envelope, paginate, dump, dump_many
from .models import Product
from .schema import ProductCreate, ProductUpdate, ProductResponse
from .service import ProductService

router = APIRouter(
    prefix="/api/products",
    tags=["products"]
)
logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    product = Product(retailer_id=retailer.id, is_active=True, **payload.to_columns())
    try:
        db.add(product)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(product)

    logger.info(f"Product {product.id} created", extra={"retailer_id": retailer.id, "product_id": product.id})
    return envelope(dump(ProductResponse, product), message="Product created successfully")


@router.get("")
def list_products(
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    query = db.query(Product).filter(Product.retailer_id == retailer.id)
    if category:
        query = query.filter(Product.category == category)
    if is_active is not None:
        query = query.filter(Product.is_active.is_(is_active))

    rows, pagination = paginate(query.order_by(Product.created_at.desc()), page, limit)
    return envelope(dump_many(ProductResponse, rows), pagination=pagination)


@router.get("/categories")
def list_categories(
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    rows = (db.query(Product.category)
            .filter(Product.retailer_id == retailer.id, Product.category.isnot(None))
            .distinct()
            .order_by(Product.category)
            .all())
    return envelope([row.category for row in rows])


@router.get("/{product_id}")
def get_product(
    product_id: UUID,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    product = ProductService.get_product(db, retailer.id, str(product_id))
    return envelope(dump(ProductResponse, product))


@router.put("/{product_id}")
def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    changes = payload.to_columns(exclude_unset=True)
    if not changes:
        raise InputValidationError("No valid fields to update")

    product = ProductService.get_product(db, retailer.id, str(product_id))
    for field, value in changes.items():
        setattr(product, field, value)
    product.updated_at = datetime.utcnow()

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(product)
    return envelope(dump(ProductResponse, product), message="Product updated successfully")


@router.patch("/{product_id}/toggle-status")
def toggle_product_status(
    product_id: UUID,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    product = ProductService.toggle_status(db, retailer.id, str(product_id))
    state = "activated" if product.is_active else "deactivated"
    return envelope(dump(ProductResponse, product), message=f"Product {state} successfully")


@router.delete("/{product_id}")
def delete_product(
    product_id: UUID,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    ProductService.delete_product(db, retailer.id, str(product_id))
    return envelope(message="Product deleted successfully")
