"""
Order aggregation primitive.

Both the all-time order statistics and the 30-day dashboard figures are
folds over (status, total_amount) rows; the only difference is the time
window, which `since` selects.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from .models import Order, OrderStatus, ORDER_STATUSES

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Convert a stored amount to a cent-precision Decimal"""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def format_amount(value: Decimal) -> str:
    return str(value.quantize(CENT))


@dataclass
class OrderSummary:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=lambda: {s: 0 for s in ORDER_STATUSES})
    revenue: Decimal = Decimal("0.00")

    def count(self, status: str) -> int:
        return self.by_status.get(status, 0)


def summarize_orders(rows: Iterable[Tuple[str, Any]]) -> OrderSummary:
    """Fold (status, total_amount) rows into counts and delivered revenue.

    Revenue only counts delivered orders; every other status is excluded
    whatever its amount.
    """
    summary = OrderSummary()
    for status, amount in rows:
        summary.total += 1
        if status in summary.by_status:
            summary.by_status[status] += 1
        if status == OrderStatus.DELIVERED.value:
            summary.revenue += to_money(amount)
    return summary


def order_rows(db: Session, retailer_id: str, since: Optional[datetime] = None) -> List[Tuple[str, Any, datetime]]:
    """(status, total_amount, created_at) for a retailer, optionally windowed"""
    query = (db.query(Order.status, Order.total_amount, Order.created_at)
             .filter(Order.retailer_id == retailer_id))
    if since is not None:
        query = query.filter(Order.created_at >= since)
    return [tuple(row) for row in query.all()]


def order_summary(db: Session, retailer_id: str, since: Optional[datetime] = None) -> OrderSummary:
    return summarize_orders((status, amount) for status, amount, _ in order_rows(db, retailer_id, since))


def daily_order_counts(timestamps: Iterable[datetime], days: int = 7, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Orders per UTC calendar day for the `days` days ending today, oldest first.

    Every day in the window is present, seeded at zero. Timestamps are
    naive UTC; ones falling outside the window are ignored.
    """
    today = today or datetime.utcnow().date()
    counts = {(today - timedelta(days=offset)).isoformat(): 0 for offset in range(days - 1, -1, -1)}
    for ts in timestamps:
        key = ts.date().isoformat()
        if key in counts:
            counts[key] += 1
    return [{"date": day, "orders": n} for day, n in counts.items()]
