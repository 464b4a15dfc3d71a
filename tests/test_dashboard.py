"""
Tests for the retailer dashboard and the order aggregation it shares with /api/orders/stats
"""
from datetime import date, datetime, timedelta

import pytest

from orders.models import Order
from orders.stats import summarize_orders, daily_order_counts, to_money
from product.models import Product
from retailer.dashboard import fetch_concurrently, build_dashboard


def _add_order(db_session, retailer, product, status="pending", amount=10.0, created_at=None):
    order = Order(
        retailer_id=retailer.id,
        product_id=product.id,
        customer_name="C",
        quantity=1,
        unit_price=amount,
        total_amount=amount,
        status=status,
        created_at=created_at or datetime.utcnow(),
    )
    db_session.add(order)
    return order


@pytest.mark.unit
class TestOrderAggregation:
    def test_revenue_counts_delivered_only(self):
        summary = summarize_orders([
            ("delivered", 10.10),
            ("delivered", 0.20),
            ("shipped", 500),
            ("cancelled", 99),
        ])
        assert summary.total == 4
        assert summary.count("delivered") == 2
        assert summary.count("confirmed") == 0
        assert summary.revenue == to_money("10.30")

    def test_empty_rows(self):
        summary = summarize_orders([])
        assert summary.total == 0
        assert str(summary.revenue) == "0.00"

    def test_daily_counts_cover_seven_days_oldest_first(self):
        today = date(2024, 3, 10)
        stamps = [
            datetime(2024, 3, 10, 23, 59),
            datetime(2024, 3, 10, 0, 0),
            datetime(2024, 3, 4, 12, 0),
            datetime(2024, 3, 3, 12, 0),  # outside the window
        ]
        series = daily_order_counts(stamps, days=7, today=today)

        assert [d["date"] for d in series] == [
            "2024-03-04", "2024-03-05", "2024-03-06", "2024-03-07",
            "2024-03-08", "2024-03-09", "2024-03-10",
        ]
        assert series[0]["orders"] == 1
        assert series[-1]["orders"] == 2
        assert sum(d["orders"] for d in series) == 3

    def test_daily_counts_zero_filled(self):
        series = daily_order_counts([], days=7, today=date(2024, 1, 1))
        assert len(series) == 7
        assert all(d["orders"] == 0 for d in series)
        assert series[0]["date"] == "2023-12-26"


class TestFetchConcurrently:
    def test_collects_results_by_name(self, db_session):
        results = fetch_concurrently(db_session.get_bind(), {
            "one": lambda s: 1,
            "products": lambda s: s.query(Product).count(),
        })
        assert results == {"one": 1, "products": 0}

    def test_first_failure_propagates(self, db_session):
        def boom(session):
            raise RuntimeError("fetch failed")

        with pytest.raises(RuntimeError, match="fetch failed"):
            fetch_concurrently(db_session.get_bind(), {"ok": lambda s: 1, "bad": boom})


class TestDashboard:
    def test_dashboard_figures(self, client, auth_headers, sample_retailer, sample_product, db_session):
        now = datetime.utcnow()
        db_session.add_all([
            Product(retailer_id=sample_retailer.id, name="Low", price=5, stock=3, is_active=True),
            Product(retailer_id=sample_retailer.id, name="Empty", price=5, stock=0, is_active=True),
            Product(retailer_id=sample_retailer.id, name="Hidden", price=5, stock=1, is_active=False),
        ])
        _add_order(db_session, sample_retailer, sample_product, "delivered", 100.00, now - timedelta(days=2))
        _add_order(db_session, sample_retailer, sample_product, "delivered", 50.25, now - timedelta(days=20))
        _add_order(db_session, sample_retailer, sample_product, "pending", 70.00, now)
        _add_order(db_session, sample_retailer, sample_product, "shipped", 30.00, now - timedelta(days=1))
        # Outside the 30-day window
        _add_order(db_session, sample_retailer, sample_product, "delivered", 999.00, now - timedelta(days=45))
        db_session.commit()

        resp = client.get("/api/retailer/dashboard", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]

        assert data["store"]["id"] == sample_retailer.id
        assert data["productStats"] == {"total": 4, "active": 3, "inactive": 1, "outOfStock": 1}
        assert data["orderStats"] == {
            "totalLast30Days": 4,
            "pending": 1,
            "delivered": 2,
            "revenueLast30Days": "150.25",
        }
        assert [p["name"] for p in data["lowStockProducts"]] == ["Empty", "Low"]

        chart = data["weeklyOrderChart"]
        assert len(chart) == 7
        assert chart[-1]["date"] == now.date().isoformat()
        assert sum(day["orders"] for day in chart) == 3

    def test_dashboard_for_new_store(self, client, auth_headers, sample_retailer):
        data = client.get("/api/retailer/dashboard", headers=auth_headers).json()["data"]
        assert data["productStats"]["total"] == 0
        assert data["orderStats"]["revenueLast30Days"] == "0.00"
        assert data["lowStockProducts"] == []
        assert all(day["orders"] == 0 for day in data["weeklyOrderChart"])

    def test_low_stock_list_is_capped(self, db_session, sample_retailer):
        for i in range(12):
            db_session.add(Product(retailer_id=sample_retailer.id, name=f"P{i}", price=1, stock=i % 5, is_active=True))
        db_session.commit()

        data = build_dashboard(db_session, sample_retailer)
        stocks = [p["stock"] for p in data["lowStockProducts"]]
        assert len(stocks) == 10
        assert stocks == sorted(stocks)

    def test_dashboard_ignores_other_retailers(self, client, other_auth_headers, other_retailer, sample_order):
        data = client.get("/api/retailer/dashboard", headers=other_auth_headers).json()["data"]
        assert data["orderStats"]["totalLast30Days"] == 0
        assert data["productStats"]["total"] == 0

    def test_dashboard_failure_is_logged(self, db_session, sample_retailer, mocker):
        mocker.patch("retailer.dashboard.order_rows", side_effect=RuntimeError("db down"))
        log_error = mocker.patch("retailer.dashboard.logger.error")

        with pytest.raises(RuntimeError):
            build_dashboard(db_session, sample_retailer)
        log_error.assert_called_once()
