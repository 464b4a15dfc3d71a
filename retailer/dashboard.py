"""
Retailer dashboard aggregation.

Four independent reads run concurrently on a thread pool, each in its own
session; the first failure fails the whole dashboard.
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from config.database import isolated_session
from models import Retailer
from product.models import Product
from orders.models import Order, OrderStatus
from orders.stats import order_rows, summarize_orders, daily_order_counts, format_amount
from shared_utils.responses import dump
from .schema import RetailerResponse

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "5"))
LOW_STOCK_LIMIT = 10
ORDER_WINDOW_DAYS = 30
CHART_DAYS = 7


def fetch_concurrently(bind, jobs: Dict[str, Callable[[Session], Any]]) -> Dict[str, Any]:
    """
    Run each job with its own session on a thread pool and join the results

    Args:
        bind: Engine (or connection) the sessions are opened on
        jobs: name -> callable taking a session

    Returns:
        name -> job result

    Raises:
        Whatever the first failing job raised; pending jobs are cancelled
    """
    def run(job):
        with isolated_session(bind) as session:
            return job(session)

    pool = ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="dashboard")
    try:
        futures = {pool.submit(run, job): name for name, job in jobs.items()}
        results = {}
        for future in as_completed(futures):
            results[futures[future]] = future.result()
        return results
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


def build_dashboard(db: Session, retailer: Retailer, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    retailer_id = retailer.id
    month_start = now - timedelta(days=ORDER_WINDOW_DAYS)
    week_start = now - timedelta(days=CHART_DAYS)

    jobs = {
        "products": lambda s: (s.query(Product.is_active, Product.stock)
                               .filter(Product.retailer_id == retailer_id)
                               .all()),
        "recent_orders": lambda s: order_rows(s, retailer_id, since=month_start),
        "low_stock": lambda s: (s.query(Product.id, Product.name, Product.stock)
                                .filter(Product.retailer_id == retailer_id,
                                        Product.is_active.is_(True),
                                        Product.stock <= LOW_STOCK_THRESHOLD)
                                .order_by(Product.stock.asc())
                                .limit(LOW_STOCK_LIMIT)
                                .all()),
        "weekly_orders": lambda s: [row.created_at for row in
                                    s.query(Order.created_at)
                                    .filter(Order.retailer_id == retailer_id, Order.created_at >= week_start)
                                    .order_by(Order.created_at.asc())
                                    .all()],
    }

    try:
        results = fetch_concurrently(db.get_bind(), jobs)
    except Exception as e:
        logger.error(f"Dashboard fetch failed: {e}", extra={"retailer_id": retailer_id})
        raise

    products = results["products"]
    total_products = len(products)
    active_products = sum(1 for p in products if p.is_active)

    summary = summarize_orders((status, amount) for status, amount, _ in results["recent_orders"])

    return {
        "store": dump(RetailerResponse, retailer),
        "productStats": {
            "total": total_products,
            "active": active_products,
            "inactive": total_products - active_products,
            "outOfStock": sum(1 for p in products if p.stock == 0),
        },
        "orderStats": {
            "totalLast30Days": summary.total,
            "pending": summary.count(OrderStatus.PENDING.value),
            "delivered": summary.count(OrderStatus.DELIVERED.value),
            "revenueLast30Days": format_amount(summary.revenue),
        },
        "lowStockProducts": [
            {"id": row.id, "name": row.name, "stock": row.stock} for row in results["low_stock"]
        ],
        "weeklyOrderChart": daily_order_counts(results["weekly_orders"], days=CHART_DAYS, today=now.date()),
    }
