"""
Tests for dashboard widgets, the sales report and its exports.
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from restaurant_admin.api import analytics as analytics_api
from restaurant_admin.models import Order, OrderItem, OrderStatus, OrderType, PaymentStatus
from restaurant_admin.services import analytics

NOW = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


def build_order(number, created_at, status, payment_method, lines):
    """Order with items whose timestamps match the order."""
    items = [
        OrderItem(
            product_id=product.id,
            quantity=quantity,
            unit_price=product.price,
            total_price=product.price * quantity,
            created_at=created_at,
        )
        for product, quantity in lines
    ]
    total = sum(item.total_price for item in items)
    return Order(
        number=number,
        order_type=OrderType.TAKEAWAY,
        customer_name=f"Customer {number}",
        customer_phone="11987654321",
        status=status,
        payment_method=payment_method,
        payment_status=PaymentStatus.PAID,
        subtotal=total,
        total=total,
        created_at=created_at,
        items=items,
    )


@pytest.fixture
async def seed_sales(db_session, seed_catalog, seed_payment_methods):
    """
    Two orders in the last seven days and one in the seven days before.

        000001  2026-02-28  veggie x1 + soda x3  = 40.00  card
        000002  2026-03-08  soda x5              = 30.00  card
        000003  2026-03-09  burger x2            = 50.00  pix keyword
    """
    products = seed_catalog["products"]
    card = str(seed_payment_methods["card"].id)
    orders = [
        build_order("000001", NOW - timedelta(days=10), OrderStatus.DELIVERED, card,
                    [(products["veggie"], 1), (products["soda"], 3)]),
        build_order("000002", NOW - timedelta(days=2), OrderStatus.PENDING, card,
                    [(products["soda"], 5)]),
        build_order("000003", NOW - timedelta(days=1), OrderStatus.DELIVERED, "pix",
                    [(products["burger"], 2)]),
    ]
    db_session.add_all(orders)
    await db_session.commit()
    return orders


class TestDashboard:

    async def test_stats_with_trends(self, db_session, seed_sales):
        stats = await analytics.dashboard_stats(db_session, NOW)

        assert stats.total_orders.value == 2
        assert stats.total_orders.trend == 100.0
        assert stats.delivered_orders.value == 1
        assert stats.delivered_orders.trend == 0.0
        assert stats.revenue.value == 80.0
        assert stats.revenue.trend == 100.0
        assert stats.average_ticket.value == 40.0
        assert stats.average_ticket.trend == 0.0

    async def test_empty_dashboard(self, db_session):
        stats = await analytics.dashboard_stats(db_session, NOW)
        assert stats.revenue.value == 0
        assert stats.average_ticket.trend == 0

    async def test_orders_by_status(self, db_session, seed_sales):
        counts = await analytics.orders_by_status(db_session, NOW)
        assert [(c.status, c.label, c.count) for c in counts] == [
            (OrderStatus.PENDING, "Pending", 1),
            (OrderStatus.DELIVERED, "Delivered", 1),
        ]
        assert counts[0].color == "#FF9800"

    async def test_daily_revenue_in_local_days(self, db_session, seed_sales):
        series = await analytics.daily_revenue(db_session, NOW)
        assert [(d.day, d.date, d.revenue) for d in series] == [
            ("Sun", date(2026, 3, 8), 30.0),
            ("Mon", date(2026, 3, 9), 50.0),
        ]

    async def test_most_sold_items(self, db_session, seed_sales):
        top = await analytics.most_sold_items(db_session, NOW)
        assert [(p.name, p.quantity, p.revenue) for p in top] == [
            ("Soda", 5, 30.0),
            ("Classic Burger", 2, 50.0),
        ]

    async def test_recent_orders_endpoint(self, client, seed_sales):
        data = (await client.get("/api/dashboard/recent-orders")).json()
        assert [o["number"] for o in data] == ["000003", "000002", "000001"]


class TestSalesReport:

    async def test_report(self, db_session, seed_sales):
        report = await analytics.sales_report(db_session, date(2026, 2, 28), date(2026, 3, 10))

        assert report.total_orders == 3
        assert report.total_revenue == 120.0
        assert report.average_ticket == 40.0

        assert [(p.name, p.quantity, p.revenue) for p in report.top_products] == [
            ("Soda", 8, 48.0),
            ("Classic Burger", 2, 50.0),
            ("Veggie Burger", 1, 22.0),
        ]
        assert [(m.name, m.count, m.total) for m in report.payment_methods] == [
            ("Credit card", 2, 70.0),
            ("PIX", 1, 50.0),
        ]
        assert [(d.date, d.orders, d.revenue) for d in report.daily] == [
            (date(2026, 2, 28), 1, 40.0),
            (date(2026, 3, 8), 1, 30.0),
            (date(2026, 3, 9), 1, 50.0),
        ]
        assert [row.number for row in report.orders] == ["000003", "000002", "000001"]
        assert report.orders[2].items == "Veggie Burger (1x); Soda (3x)"

    async def test_range_is_inclusive_in_local_time(self, db_session, seed_sales):
        report = await analytics.sales_report(db_session, date(2026, 3, 9), date(2026, 3, 9))
        assert [row.number for row in report.orders] == ["000003"]

    def test_swapped_range(self):
        assert analytics.report_range(date(2026, 3, 9), date(2026, 3, 1)) == (date(2026, 3, 1), date(2026, 3, 9))

    async def test_report_endpoint(self, client, seed_sales):
        response = await client.get("/api/reports/sales", params={"start": "2026-02-28", "end": "2026-03-10"})
        assert response.status_code == 200
        assert response.json()["total_revenue"] == 120.0

    async def test_csv_export(self, client, seed_sales):
        response = await client.get("/api/reports/sales.csv", params={"start": "2026-02-28", "end": "2026-03-10"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "sales-report-2026-02-28-2026-03-10.csv" in response.headers["content-disposition"]

        lines = response.text.strip().split("\n")
        assert lines[0] == '"Order number","Date","Customer","Status","Payment method","Total","Items"'
        assert lines[1] == (
            '"000003","09/03/2026 12:00","Customer 000003","Delivered","PIX","50.00","Classic Burger (2x)"'
        )
        assert len(lines) == 4

    async def test_excel_export_is_queued(self, client, seed_sales, monkeypatch):
        queued = []

        def fake_delay(report):
            queued.append(report)
            return SimpleNamespace(id="task-123")

        monkeypatch.setattr(analytics_api, "export_report_to_excel", SimpleNamespace(delay=fake_delay))

        response = await client.post(
            "/api/reports/sales/export", params={"start": "2026-02-28", "end": "2026-03-10"}
        )
        assert response.status_code == 202
        assert response.json()["task_id"] == "task-123"
        assert queued[0]["total_orders"] == 3
        assert queued[0]["start"] == "2026-02-28"
