"""
Dashboard and Report Analytics

Dashboard widgets cover the last seven days:
    - Headline stats with trend against the seven days before
    - Orders per status, revenue per day, most sold products, recent orders

The sales report covers a date range (last 30 days by default) and can be
exported as CSV or, through a Celery task, as an Excel workbook.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.config import get_settings
from restaurant_admin.models import Order, OrderItem, OrderStatus, Product
from restaurant_admin.schemas import (
    DailyRevenue,
    DailySales,
    DashboardStats,
    OrderView,
    PaymentMethodSales,
    ProductSales,
    ReportOrderRow,
    SalesReport,
    StatValue,
    StatusCount,
)
from restaurant_admin.services.order_status import get_status_config
from restaurant_admin.services.orders import (
    newest_first,
    not_archived,
    order_load_options,
    to_order_view,
)
from restaurant_admin.services.pricing import calculate_trend
from restaurant_admin.services.report_exporter import ReportExporter
from restaurant_admin.services.restaurant import payment_method_name

logger = logging.getLogger(__name__)
settings = get_settings()

STATUS_COLORS = {
    OrderStatus.PENDING: "#FF9800",
    OrderStatus.CONFIRMED: "#FFC107",
    OrderStatus.PREPARING: "#2196F3",
    OrderStatus.READY: "#4CAF50",
    OrderStatus.OUT_FOR_DELIVERY: "#9C27B0",
    OrderStatus.DELIVERED: "#4CAF50",
    OrderStatus.CANCELED: "#F44336",
}

WEEKDAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MOST_SOLD_LIMIT = 5
TOP_PRODUCTS_LIMIT = 10


def utc(moment: Optional[datetime]) -> datetime:
    """Aware UTC datetime. Naive values (as SQLite returns them) are taken as UTC."""
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def local_date(moment: datetime) -> date:
    return utc(moment).astimezone(ZoneInfo(settings.timezone)).date()


async def _orders_between(
    db: AsyncSession,
    start: datetime,
    end: Optional[datetime] = None,
    with_items: bool = False,
) -> list[Order]:
    query = select(Order).where(Order.created_at >= start, not_archived())
    if end is not None:
        query = query.where(Order.created_at < end)
    if with_items:
        query = query.options(*order_load_options())
    result = await db.execute(query.order_by(Order.created_at.asc(), Order.id.asc()))
    return list(result.scalars().all())


def _period_stats(orders: list[Order]) -> dict[str, float]:
    total = len(orders)
    revenue = sum(o.total for o in orders)
    return {
        "total_orders": total,
        "delivered_orders": sum(1 for o in orders if o.status == OrderStatus.DELIVERED),
        "revenue": revenue,
        "average_ticket": revenue / total if total else 0.0,
    }


# =============================================================================
# DASHBOARD
# =============================================================================

async def dashboard_stats(db: AsyncSession, now: Optional[datetime] = None) -> DashboardStats:
    """Last window vs the window before it."""
    now = utc(now)
    window = timedelta(days=settings.dashboard_window_days)
    current_start = now - window
    previous_start = current_start - window

    current = _period_stats(await _orders_between(db, current_start))
    previous = _period_stats(await _orders_between(db, previous_start, current_start))

    return DashboardStats(**{
        key: StatValue(
            value=round(current[key], 2),
            trend=calculate_trend(current[key], previous[key]),
        )
        for key in current
    })


async def orders_by_status(db: AsyncSession, now: Optional[datetime] = None) -> list[StatusCount]:
    since = utc(now) - timedelta(days=settings.dashboard_window_days)
    result = await db.execute(
        select(Order.status, func.count(Order.id))
        .where(Order.created_at >= since, not_archived())
        .group_by(Order.status)
    )
    counts = {status: count for status, count in result.all()}

    return [
        StatusCount(
            status=status,
            label=get_status_config(status).label,
            count=counts[status],
            color=STATUS_COLORS[status],
        )
        for status in OrderStatus
        if counts.get(status)
    ]


async def daily_revenue(db: AsyncSession, now: Optional[datetime] = None) -> list[DailyRevenue]:
    """Revenue per local day, oldest day first. Days without orders are omitted."""
    since = utc(now) - timedelta(days=settings.dashboard_window_days)
    orders = await _orders_between(db, since)

    per_day: dict[date, float] = {}
    for order in orders:
        day = local_date(order.created_at)
        per_day[day] = per_day.get(day, 0.0) + order.total

    return [
        DailyRevenue(day=WEEKDAY_ABBREVIATIONS[day.weekday()], date=day, revenue=round(revenue, 2))
        for day, revenue in sorted(per_day.items())
    ]


async def most_sold_items(db: AsyncSession, now: Optional[datetime] = None) -> list[ProductSales]:
    """Top products by quantity, grouped over every matching item."""
    since = utc(now) - timedelta(days=settings.dashboard_window_days)
    quantity = func.sum(OrderItem.quantity).label("quantity")
    result = await db.execute(
        select(Product.id, Product.name, quantity, func.sum(OrderItem.total_price))
        .join(Product, Product.id == OrderItem.product_id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(OrderItem.created_at >= since, not_archived())
        .group_by(Product.id, Product.name)
        .order_by(quantity.desc(), Product.name)
        .limit(MOST_SOLD_LIMIT)
    )
    return [
        ProductSales(product_id=pid, name=name, quantity=int(qty), revenue=round(revenue or 0.0, 2))
        for pid, name, qty, revenue in result.all()
    ]


async def recent_orders(db: AsyncSession) -> list[OrderView]:
    result = await db.execute(
        select(Order)
        .options(*order_load_options())
        .where(not_archived())
        .order_by(*newest_first())
        .limit(settings.recent_orders_limit)
    )
    return [to_order_view(o) for o in result.scalars().all()]


# =============================================================================
# REPORTS
# =============================================================================

def report_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    """Default range: the last N days up to today (local time)."""
    end = end or local_date(datetime.now(timezone.utc))
    start = start or end - timedelta(days=settings.report_window_days)
    if start > end:
        start, end = end, start
    return start, end


def _local_midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=ZoneInfo(settings.timezone)).astimezone(timezone.utc)


async def sales_report(
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> SalesReport:
    """Totals, top products, payment methods and daily series for a date range (inclusive)."""
    start, end = report_range(start, end)
    orders = await _orders_between(
        db, _local_midnight_utc(start), _local_midnight_utc(end + timedelta(days=1)), with_items=True
    )

    total_revenue = sum(o.total for o in orders)

    products: dict[int, ProductSales] = {}
    methods: dict[str, PaymentMethodSales] = {}
    days: dict[date, DailySales] = {}
    rows = []
    method_names: dict[str, str] = {}

    for order in orders:
        for item in order.items:
            entry = products.get(item.product_id)
            if entry is None:
                name = item.product.name if item.product else "Removed product"
                entry = products[item.product_id] = ProductSales(
                    product_id=item.product_id, name=name, quantity=0, revenue=0.0
                )
            entry.quantity += item.quantity
            entry.revenue = round(entry.revenue + item.total_price, 2)

        method = order.payment_method
        if method not in method_names:
            method_names[method] = await payment_method_name(db, method)
        sales = methods.get(method)
        if sales is None:
            sales = methods[method] = PaymentMethodSales(
                method=method, name=method_names[method], count=0, total=0.0
            )
        sales.count += 1
        sales.total = round(sales.total + order.total, 2)

        day = local_date(order.created_at)
        daily = days.get(day)
        if daily is None:
            daily = days[day] = DailySales(date=day, orders=0, revenue=0.0)
        daily.orders += 1
        daily.revenue = round(daily.revenue + order.total, 2)

        rows.append(ReportOrderRow(
            number=order.number,
            created_at=order.created_at,
            customer_name=order.customer_name,
            status=order.status,
            status_label=get_status_config(order.status).label,
            payment_method=method_names[method],
            total=order.total,
            items="; ".join(
                f"{item.product.name if item.product else 'Removed product'} ({item.quantity}x)"
                for item in order.items
            ),
        ))

    logger.info(f"Sales report {start} to {end}: {len(orders)} order(s), revenue {total_revenue:.2f}")

    return SalesReport(
        start=start,
        end=end,
        total_orders=len(orders),
        total_revenue=round(total_revenue, 2),
        average_ticket=round(total_revenue / len(orders), 2) if orders else 0.0,
        top_products=sorted(products.values(), key=lambda p: (-p.quantity, p.name))[:TOP_PRODUCTS_LIMIT],
        payment_methods=sorted(methods.values(), key=lambda m: -m.total),
        daily=[days[d] for d in sorted(days)],
        # Newest first, as listed on the reports page
        orders=list(reversed(rows)),
    )


def report_csv(report: SalesReport) -> str:
    return ReportExporter.to_csv(report.model_dump(mode="json"))
