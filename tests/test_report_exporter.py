"""
Tests for report file exports and the export task.
"""

import pytest

from restaurant_admin.services.report_exporter import ReportExporter
from restaurant_admin.tasks import export_report_to_excel


REPORT = {
    "start": "2026-03-01",
    "end": "2026-03-10",
    "total_orders": 2,
    "total_revenue": 75.5,
    "average_ticket": 37.75,
    "top_products": [
        {"product_id": 1, "name": "Classic Burger", "quantity": 2, "revenue": 50.0},
    ],
    "payment_methods": [
        {"method": "pix", "name": "PIX", "count": 2, "total": 75.5},
    ],
    "daily": [
        {"date": "2026-03-02", "orders": 1, "revenue": 50.0},
        {"date": "2026-03-05", "orders": 1, "revenue": 25.5},
    ],
    "orders": [
        {
            "number": "000002",
            "created_at": "2026-03-05T22:30:00+00:00",
            "customer_name": "Ana",
            "status": "delivered",
            "status_label": "Delivered",
            "payment_method": "PIX",
            "total": 25.5,
            "items": "Soda (1x)",
        },
        {
            "number": None,
            "created_at": "2026-03-02T01:15:00",
            "customer_name": 'Bruno "B"',
            "status": "canceled",
            "status_label": "Canceled",
            "payment_method": "PIX",
            "total": 50,
            "items": "Classic Burger (2x)",
        },
    ],
}


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    """Point the default export location at a temporary directory."""
    monkeypatch.setattr(ReportExporter, "data_dir", classmethod(lambda cls: tmp_path))
    monkeypatch.setattr(ReportExporter, "report_file", classmethod(lambda cls: tmp_path / "report.xlsx"))
    return tmp_path


class TestCsv:

    def test_rows_in_local_time(self):
        lines = ReportExporter.to_csv(REPORT).strip().split("\n")

        assert lines[0] == '"Order number","Date","Customer","Status","Payment method","Total","Items"'
        assert lines[1] == '"000002","05/03/2026 19:30","Ana","Delivered","PIX","25.50","Soda (1x)"'
        # Naive timestamps are UTC, so this one falls on the previous local day
        assert lines[2] == '"","01/03/2026 22:15","Bruno ""B""","Canceled","PIX","50.00","Classic Burger (2x)"'

    def test_empty_report_has_header_only(self):
        csv_text = ReportExporter.to_csv({"orders": []})
        assert csv_text.strip().count("\n") == 0
        assert csv_text.startswith('"Order number"')


class TestExcel:

    def test_export_and_read_back(self, tmp_path):
        file_path = tmp_path / "sales.xlsx"

        result = ReportExporter.export_excel(REPORT, file_path=file_path)

        assert result["success"] is True
        assert result["file"] == str(file_path)
        assert result["exported_at"] is not None
        assert file_path.exists()

        rows = ReportExporter.read_orders(file_path)
        assert [row["Order number"] for row in rows] == ["000002", ""]
        assert rows[0]["Total"] == "25.50"

    def test_read_missing_file(self, tmp_path):
        assert ReportExporter.read_orders(tmp_path / "missing.xlsx") == []

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            ReportExporter.export_excel(REPORT, file_path=blocker / "sales.xlsx")

    def test_clear_exports(self, export_dir):
        ReportExporter.export_excel(REPORT)
        assert (export_dir / "report.xlsx").exists()

        assert ReportExporter.clear_exports() is True
        assert not (export_dir / "report.xlsx").exists()


class TestExportTask:

    def test_task_writes_workbook(self, export_dir):
        result = export_report_to_excel.apply(args=[REPORT]).get()

        assert result["success"] is True
        assert result["task_id"]
        assert result["processing_time_seconds"] >= 0
        assert (export_dir / "report.xlsx").exists()

    def test_disk_errors_are_retried(self, tmp_path, monkeypatch):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        monkeypatch.setattr(ReportExporter, "data_dir", classmethod(lambda cls: tmp_path))
        monkeypatch.setattr(ReportExporter, "report_file", classmethod(lambda cls: blocker / "report.xlsx"))

        attempts = []
        export_excel = ReportExporter.export_excel

        def counting_export(cls, report, file_path=None):
            attempts.append(report["start"])
            return export_excel(report, file_path)

        monkeypatch.setattr(ReportExporter, "export_excel", classmethod(counting_export))

        result = export_report_to_excel.apply(args=[REPORT])

        assert result.failed()
        assert isinstance(result.result, OSError)
        assert len(attempts) == export_report_to_excel.max_retries + 1
