from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import orm
from sqlalchemy.orm import joinedload
from typing import Optional
from uuid import UUID
import logging

from config.database import get_db
from models import Retailer
from shared_utils.auth import get_current_retailer
from shared_utils.responses import envelope, paginate, dump, dump_many
from .models import Order, OrderStatus, ORDER_STATUSES
from .schema import OrderCreate, OrderStatusUpdate, OrderResponse, OrderDetailResponse
from .service import OrderService
from .stats import order_summary, format_amount

router = APIRouter(
    prefix="/api/orders",
    tags=["orders"]
)
logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    order = OrderService.create_order(db, retailer.id, payload)
    return envelope(dump(OrderResponse, order), message="Order created successfully")


@router.get("")
def list_orders(
    status: Optional[OrderStatus] = None,
    customer_name: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    query = (db.query(Order)
             .options(joinedload(Order.product))
             .filter(Order.retailer_id == retailer.id))
    if status is not None:
        query = query.filter(Order.status == status.value)
    if customer_name:
        query = query.filter(Order.customer_name.ilike(f"%{customer_name}%"))

    rows, pagination = paginate(query.order_by(Order.created_at.desc()), page, limit)
    return envelope(dump_many(OrderResponse, rows), pagination=pagination)


@router.get("/stats")
def get_order_stats(
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    summary = order_summary(db, retailer.id)
    order_stats = {"total": summary.total}
    order_stats.update({s: summary.count(s) for s in ORDER_STATUSES})
    return envelope({
        "orderStats": order_stats,
        "totalRevenue": format_amount(summary.revenue),
    })


@router.get("/{order_id}")
def get_order(
    order_id: UUID,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    order = OrderService.get_order(db, retailer.id, str(order_id))
    return envelope(dump(OrderDetailResponse, order))


@router.put("/{order_id}")
def update_order_status(
    order_id: UUID,
    payload: OrderStatusUpdate,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    order = OrderService.update_order_status(db, retailer.id, str(order_id), payload)
    return envelope(dump(OrderResponse, order), message="Order updated successfully")


@router.delete("/{order_id}")
def delete_order(
    order_id: UUID,
    retailer: Retailer = Depends(get_current_retailer),
    db: orm.Session = Depends(get_db)
):
    restored = OrderService.delete_order(db, retailer.id, str(order_id))
    return envelope({"restoredStock": restored}, message="Order deleted successfully")
