"""
Sales Report Exporter with Concurrency Control

File exports of the sales report:
- Excel workbook (orders, top products, payment methods, daily sales sheets)
- CSV of the order rows

Excel writes are serialized with a file lock so concurrent Celery workers
never interleave on the same workbook.
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from filelock import FileLock, Timeout

from restaurant_admin.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class ReportExporter:
    """Writes sales reports (as produced by the analytics service) to files."""

    LOCK_TIMEOUT = settings.export_lock_timeout

    CSV_COLUMNS = {
        "number": "Order number",
        "date": "Date",
        "customer_name": "Customer",
        "status_label": "Status",
        "payment_method": "Payment method",
        "total": "Total",
        "items": "Items",
    }

    @classmethod
    def data_dir(cls) -> Path:
        return Path(get_settings().data_directory)

    @classmethod
    def report_file(cls) -> Path:
        return cls.data_dir() / get_settings().report_filename

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Create data directory if needed."""
        data_dir = cls.data_dir()
        if not data_dir.exists():
            data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {data_dir}")

    @classmethod
    def _local_timestamp(cls, value) -> Optional[pd.Timestamp]:
        """Order timestamp in restaurant time. Naive values are UTC."""
        if value is None or value == "":
            return None
        stamp = pd.Timestamp(value)
        if stamp.tzinfo is None:
            stamp = stamp.tz_localize("UTC")
        return stamp.tz_convert(get_settings().timezone)

    @classmethod
    def orders_frame(cls, report: dict[str, Any]) -> pd.DataFrame:
        """One row per order with the CSV column titles."""
        rows = []
        for order in report.get("orders", []):
            created_at = cls._local_timestamp(order.get("created_at"))
            rows.append({
                "number": order.get("number") or "",
                "date": created_at.strftime("%d/%m/%Y %H:%M") if created_at is not None else "",
                "customer_name": order.get("customer_name"),
                "status_label": order.get("status_label"),
                "payment_method": order.get("payment_method"),
                "total": f"{float(order.get('total') or 0):.2f}",
                "items": order.get("items"),
            })
        df = pd.DataFrame(rows, columns=list(cls.CSV_COLUMNS))
        return df.rename(columns=cls.CSV_COLUMNS)

    @classmethod
    def to_csv(cls, report: dict[str, Any]) -> str:
        """Every field quoted, one line per order."""
        return cls.orders_frame(report).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")

    @classmethod
    def export_excel(cls, report: dict[str, Any], file_path: Optional[Path] = None) -> dict[str, Any]:
        """
        Write the report workbook with file locking.

        Raises:
            OSError: The workbook or its lock could not be written
        """
        cls._ensure_data_dir()

        file_path = Path(file_path) if file_path else cls.report_file()
        lock_path = file_path.with_suffix(file_path.suffix + ".lock")
        period = f"{report.get('start')} to {report.get('end')}"
        result = {
            "success": False,
            "message": "",
            "file": str(file_path),
            "exported_at": None,
        }

        try:
            lock = FileLock(str(lock_path), timeout=cls.LOCK_TIMEOUT)

            with lock:
                logger.debug(f"Lock acquired for report {period}")

                summary = pd.DataFrame([{
                    "Start": str(report.get("start")),
                    "End": str(report.get("end")),
                    "Orders": report.get("total_orders", 0),
                    "Revenue": report.get("total_revenue", 0.0),
                    "Average ticket": report.get("average_ticket", 0.0),
                }])

                with pd.ExcelWriter(str(file_path), engine="openpyxl") as writer:
                    summary.to_excel(writer, sheet_name="Summary", index=False)
                    cls.orders_frame(report).to_excel(writer, sheet_name="Orders", index=False)
                    pd.DataFrame(
                        report.get("top_products", []),
                        columns=["product_id", "name", "quantity", "revenue"],
                    ).to_excel(writer, sheet_name="Top products", index=False)
                    pd.DataFrame(
                        report.get("payment_methods", []),
                        columns=["method", "name", "count", "total"],
                    ).to_excel(writer, sheet_name="Payment methods", index=False)
                    pd.DataFrame(
                        report.get("daily", []),
                        columns=["date", "orders", "revenue"],
                    ).to_excel(writer, sheet_name="Daily sales", index=False)

                export_time = datetime.now().isoformat()
                logger.info(f"Report {period} exported to {file_path}")

                result["success"] = True
                result["message"] = f"Report {period} exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for report {period}")

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error(f"Lock timeout for report {period}")

        except OSError:
            # Propagated so the export task can retry
            logger.exception(f"I/O error exporting report {period}")
            raise

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting report {period}")

        return result

    @classmethod
    def read_orders(cls, file_path: Optional[Path] = None) -> list[dict[str, Any]]:
        """Order rows of an exported workbook."""
        file_path = Path(file_path) if file_path else cls.report_file()
        if not file_path.exists():
            return []

        try:
            df = pd.read_excel(file_path, sheet_name="Orders", engine="openpyxl", dtype=str)
            return df.fillna("").to_dict("records")
        except Exception as e:
            logger.error(f"Error reading report: {e}")
            return []

    @classmethod
    def clear_exports(cls) -> bool:
        """Delete the report workbook and its lock."""
        try:
            report_file = cls.report_file()
            for f in [report_file, report_file.with_suffix(report_file.suffix + ".lock")]:
                if f.exists():
                    f.unlink()
            logger.info("Report exports cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing exports: {e}")
            return False
