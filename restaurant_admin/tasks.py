"""
Celery Tasks
Background tasks for report exports.
"""

import logging
import time
from datetime import datetime

from restaurant_admin.celery_worker import celery_app
from restaurant_admin.services.report_exporter import ReportExporter

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(OSError,),
    retry_backoff=True
)
def export_report_to_excel(self, report: dict) -> dict:
    """
    Export a sales report to the Excel workbook.
    This task runs asynchronously via Celery worker.

    Args:
        report: SalesReport serialized with model_dump(mode="json")

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    period = f"{report.get('start')} to {report.get('end')}"

    logger.info(f"Task {task_id}: Exporting report {period}")
    start_time = time.time()

    try:
        result = ReportExporter.export_excel(report)
    except OSError as e:
        elapsed = round(time.time() - start_time, 3)
        logger.error(
            f"Task {task_id}: Report {period} error after {elapsed}s "
            f"(attempt {self.request.retries + 1}) - {e}"
        )
        # Celery retries OSError with backoff (autoretry_for)
        raise

    elapsed = round(time.time() - start_time, 3)
    result['task_id'] = task_id
    result['processing_time_seconds'] = elapsed

    if result['success']:
        logger.info(f"Task {task_id}: Report {period} completed in {elapsed}s")
    else:
        logger.warning(f"Task {task_id}: Report {period} failed - {result['message']}")

    return result


@celery_app.task
def health_check() -> dict:
    """
    Simple health check task to verify Celery is working.
    """
    return {
        'status': 'healthy',
        'worker': 'celery',
        'timestamp': datetime.now().isoformat()
    }


@celery_app.task
def clear_exports() -> dict:
    """
    Delete the exported workbook (for testing/reset purposes).
    """
    success = ReportExporter.clear_exports()
    return {
        'success': success,
        'message': 'Exports cleared' if success else 'Failed to clear exports',
        'timestamp': datetime.now().isoformat()
    }
