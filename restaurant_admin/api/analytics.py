"""
Dashboard and Report Endpoints

Dashboard widgets, the sales report (JSON and CSV) and the Excel export,
which is queued to the Celery worker.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    DailyRevenue,
    DashboardStats,
    ExportQueuedResponse,
    OrderView,
    ProductSales,
    SalesReport,
    StatusCount,
)
from restaurant_admin.services import analytics as analytics_service
from restaurant_admin.tasks import export_report_to_excel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Dashboard"])


# =============================================================================
# DASHBOARD
# =============================================================================

@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> DashboardStats:
    """Last seven days with the trend against the seven days before."""
    return await analytics_service.dashboard_stats(db)


@router.get("/dashboard/orders-by-status", response_model=list[StatusCount])
async def orders_by_status(db: AsyncSession = Depends(get_db)) -> list[StatusCount]:
    return await analytics_service.orders_by_status(db)


@router.get("/dashboard/daily-revenue", response_model=list[DailyRevenue])
async def daily_revenue(db: AsyncSession = Depends(get_db)) -> list[DailyRevenue]:
    return await analytics_service.daily_revenue(db)


@router.get("/dashboard/most-sold", response_model=list[ProductSales])
async def most_sold(db: AsyncSession = Depends(get_db)) -> list[ProductSales]:
    return await analytics_service.most_sold_items(db)


@router.get("/dashboard/recent-orders", response_model=list[OrderView])
async def recent_orders(db: AsyncSession = Depends(get_db)) -> list[OrderView]:
    return await analytics_service.recent_orders(db)


# =============================================================================
# REPORTS
# =============================================================================

@router.get("/reports/sales", response_model=SalesReport)
async def sales_report(
    start: Optional[date] = Query(None, description="First day (inclusive), defaults to 30 days ago"),
    end: Optional[date] = Query(None, description="Last day (inclusive), defaults to today"),
    db: AsyncSession = Depends(get_db),
) -> SalesReport:
    return await analytics_service.sales_report(db, start, end)


@router.get("/reports/sales.csv", response_class=Response)
async def sales_report_csv(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> Response:
    report = await analytics_service.sales_report(db, start, end)
    filename = f"sales-report-{report.start}-{report.end}.csv"
    return Response(
        content=analytics_service.report_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/reports/sales/export", response_model=ExportQueuedResponse, status_code=202)
async def export_sales_report(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> ExportQueuedResponse:
    """Queue the Excel export of the report to the worker."""
    report = await analytics_service.sales_report(db, start, end)
    task = export_report_to_excel.delay(report.model_dump(mode="json"))
    logger.info(f"Excel export of report {report.start} to {report.end} queued as task {task.id}")
    return ExportQueuedResponse(
        task_id=task.id,
        message=f"Export of {report.start} to {report.end} queued",
    )
