"""Tests for the export renderer, table builders and the PDF builder."""

import csv
import io
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from bizadmin.config import ReportConfig
from bizadmin.domain.errors import ExportError
from bizadmin.domain.records import Employee, EmployeeStatus, Invoice, InvoiceStatus, Project
from bizadmin.modules.reporting.assembler import ReportAssembler, ReportPayload
from bizadmin.modules.reporting.charts import ChartRegistry
from bizadmin.modules.reporting.export_renderer import (
    EXPORT_FORMATS,
    SPREADSHEET_COLUMN_WIDTH,
    ExportRenderer,
    build_employee_table,
    build_invoice_table,
    build_project_table,
    build_summary_sections,
    build_summary_table,
)
from bizadmin.utils.pdf_report_builder import PDFReportBuilder

from tests.conftest import TODAY

GENERATED_AT = datetime(2024, 6, 15, 9, 30, 0)


@pytest.fixture()
def renderer():
    config = ReportConfig(company_name="Acme Corp")
    return ExportRenderer(config, clock=lambda: GENERATED_AT)


@pytest.fixture()
def payload(sources):
    payload = ReportAssembler(sources, ReportConfig(company_name="Acme Corp")).assemble_sync(
        include_records=True, today=TODAY
    )
    payload.generated_at = GENERATED_AT
    return payload


def _empty_payload() -> ReportPayload:
    return ReportPayload(generated_at=GENERATED_AT, company_name="Acme Corp")


# ===========================================================================
# Table builders
# ===========================================================================
class TestTableBuilders:

    def test_employee_columns(self, sample_records):
        table = build_employee_table(sample_records["employees"])
        assert table.headers == [
            "Name", "Email", "Position", "Department", "Salary", "Start Date", "Status",
        ]
        assert table.rows[0][0] == "Ada Lovelace"

    def test_invoice_columns(self):
        table = build_invoice_table([])
        assert table.headers == ["Invoice #", "Client", "Amount", "Status", "Due Date"]
        assert table.rows == []

    def test_project_columns(self):
        table = build_project_table([Project(name="Website", progress=40)])
        assert table.headers == ["Name", "Status", "Priority", "Progress", "Budget"]

    def test_format_rows_money_date_and_enum(self, renderer):
        table = build_invoice_table([
            Invoice(invoice_number="INV-9", client_name="Globex", amount=Decimal("1234.5"),
                    status=InvoiceStatus.PAID, due_date=date(2024, 3, 7)),
        ])
        assert renderer.format_rows(table) == [
            ["INV-9", "Globex", "$1,234.50", "Paid", "03/07/2024"],
        ]

    def test_missing_values_render_blank(self, renderer):
        table = build_employee_table([
            Employee(first_name="Grace", last_name="Hopper", email="grace@example.com",
                     department="Ops", status=EmployeeStatus.ON_LEAVE),
        ])
        row = renderer.format_rows(table)[0]
        assert row[4] == ""
        assert row[5] == ""
        assert row[6] == "On Leave"

    def test_summary_sections_cover_every_domain(self, payload):
        sections = build_summary_sections(payload)
        titles = [s.title for s in sections]
        assert titles == ["Employees", "Finance", "Procurement", "Projects", "Files", "Sales"]
        finance = dict(sections[1].rows)
        assert finance["Total Revenue"] == "$1,500.00"
        assert finance["Net Profit"] == "$700.00"

    def test_failed_section_is_marked(self):
        payload = _empty_payload()
        payload.failures["finance"] = "finance fetch failed"
        table = build_summary_table(payload)
        assert ("Finance", "Status", "Data unavailable") in table.rows


# ===========================================================================
# Dispatch
# ===========================================================================
class TestExportDispatch:

    def test_unknown_format(self, renderer, payload):
        with pytest.raises(ExportError):
            renderer.export(payload, "docx")

    def test_formats_constant(self):
        assert set(EXPORT_FORMATS) == {"pdf", "xlsx", "chart-snapshot", "csv"}

    def test_chart_snapshot_needs_payload(self, renderer, sample_records):
        with pytest.raises(ExportError):
            renderer.export(sample_records["invoices"], "chart-snapshot", report_type="invoices")

    def test_empty_records_with_unknown_type(self, renderer):
        with pytest.raises(ExportError):
            renderer.export([], "csv", report_type="payroll")

    def test_filename(self, renderer):
        assert renderer.filename("pdf", "summary", GENERATED_AT) == "summary_2024-06-15.pdf"
        assert renderer.filename("chart-snapshot", "dashboard", GENERATED_AT) == "dashboard_2024-06-15.pdf"
        assert renderer.filename("xlsx", "Procurement Requests", GENERATED_AT) == (
            "procurement-requests_2024-06-15.xlsx"
        )


# ===========================================================================
# Formats
# ===========================================================================
class TestPdfExport:

    def test_summary_pdf(self, renderer, payload):
        artifact = renderer.export(payload, "pdf")
        assert artifact.content.startswith(b"%PDF")
        assert artifact.media_type == "application/pdf"
        assert artifact.filename == "summary_2024-06-15.pdf"
        assert artifact.size == len(artifact.content)

    def test_each_section_on_its_own_page(self, renderer, monkeypatch):
        captured = []

        def capture_html(builder, report_type):
            captured.append(builder.build_html())
            return b"%PDF-1.4 stub"

        monkeypatch.setattr(renderer, "_build_pdf", capture_html)
        sections = [
            build_invoice_table([]),
            build_employee_table([]),
            build_project_table([Project(name="Website", progress=40)]),
        ]
        renderer.render_pdf("Company Report", sections, "summary")

        html = captured[0]
        assert html.count('class="page-break"') == len(sections) - 1
        assert html.index("Invoice #") < html.index('class="page-break"')

    def test_summary_pdf_breaks_between_sections(self, renderer, payload, monkeypatch):
        captured = []
        monkeypatch.setattr(
            renderer, "_build_pdf",
            lambda builder, report_type: captured.append(builder.build_html()) or b"%PDF",
        )
        renderer.export(payload, "pdf")
        # six summary sections plus five record tables
        assert captured[0].count('class="page-break"') == 10

    def test_empty_record_list_still_renders(self, renderer):
        artifact = renderer.export([], "pdf", report_type="invoices")
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename == "invoices_2024-06-15.pdf"


class TestSpreadsheetExport:

    def test_layout(self, renderer, sample_records):
        artifact = renderer.export(sample_records["invoices"], "xlsx", report_type="invoices")
        ws = load_workbook(io.BytesIO(artifact.content)).active

        assert ws.cell(row=1, column=1).value == "Acme Corp"
        assert ws.cell(row=2, column=1).value == "Invoices Report"
        assert ws.cell(row=3, column=1).value == "Generated on: 2024-06-15 09:30:00"
        assert ws.cell(row=4, column=1).value is None
        assert [ws.cell(row=5, column=c).value for c in range(1, 6)] == [
            "Invoice #", "Client", "Amount", "Status", "Due Date",
        ]
        assert ws.cell(row=6, column=1).value == "INV-001"
        assert ws.cell(row=6, column=3).value == 1000
        assert ws.cell(row=6, column=4).value == "Paid"
        assert ws.cell(row=7, column=1).value == "INV-002"
        assert ws.column_dimensions["A"].width == SPREADSHEET_COLUMN_WIDTH

    def test_empty_dataset_keeps_header(self, renderer):
        artifact = renderer.export([], "xlsx", report_type="employees")
        ws = load_workbook(io.BytesIO(artifact.content)).active
        assert ws.cell(row=5, column=1).value == "Name"
        assert ws.cell(row=6, column=1).value is None

    def test_summary_spreadsheet(self, renderer, payload):
        artifact = renderer.export(payload, "xlsx")
        ws = load_workbook(io.BytesIO(artifact.content)).active
        assert [ws.cell(row=5, column=c).value for c in range(1, 4)] == ["Section", "Metric", "Value"]
        assert artifact.filename.endswith(".xlsx")


class TestCsvExport:

    def _rows(self, artifact):
        return list(csv.reader(io.StringIO(artifact.content.decode("utf-8"))))

    def test_records(self, renderer, sample_records):
        artifact = renderer.export(sample_records["invoices"], "csv", report_type="invoices")
        rows = self._rows(artifact)
        assert rows[:4] == [
            ["Acme Corp"],
            ["Invoices Report"],
            ["Generated on: 2024-06-15 09:30:00"],
            [],
        ]
        assert rows[4] == ["Invoice #", "Client", "Amount", "Status", "Due Date"]
        assert rows[5] == ["INV-001", "Globex", "$1,000.00", "Paid", "05/01/2024"]
        assert len(rows) == 7
        assert artifact.media_type.startswith("text/csv")

    def test_empty_dataset_keeps_header_block(self, renderer):
        rows = self._rows(renderer.export([], "csv", report_type="invoices"))
        assert rows[0] == ["Acme Corp"]
        assert rows[2] == ["Generated on: 2024-06-15 09:30:00"]
        assert rows[4] == ["Invoice #", "Client", "Amount", "Status", "Due Date"]
        assert len(rows) == 5

    def test_summary(self, renderer, payload):
        rows = self._rows(renderer.export(payload, "csv"))
        assert rows[1] == ["Summary Report"]
        assert rows[4] == ["Section", "Metric", "Value"]
        assert ["Finance", "Total Revenue", "$1,500.00"] in rows


class TestChartSnapshot:

    def test_default_regions(self, renderer, payload):
        artifact = renderer.export(payload, "chart-snapshot", report_type="dashboard")
        assert artifact.content.startswith(b"%PDF")
        assert artifact.filename == "dashboard_2024-06-15.pdf"

    def test_missing_and_failing_regions_are_skipped(self, payload, caplog):
        def broken(_payload):
            raise ValueError("cannot draw")

        charts = ChartRegistry()
        charts.register("broken", "Broken", broken)
        renderer = ExportRenderer(ReportConfig(company_name="Acme Corp"), charts=charts)

        artifact = renderer.render_chart_snapshot(
            ["finance_overview", "does_not_exist", "broken"], "Dashboard", payload,
        )
        assert artifact.content.startswith(b"%PDF")
        assert "does_not_exist" in caplog.text
        assert "broken" in caplog.text

    def test_regions_bypass_pyplot(self, payload):
        import matplotlib.pyplot as plt
        from matplotlib.figure import Figure

        before = plt.get_fignums()
        charts = ChartRegistry()
        for key in charts:
            fig = charts.build(key, payload)
            assert isinstance(fig, Figure)
            assert PDFReportBuilder.fig_to_png(fig).startswith(b"\x89PNG")
        assert plt.get_fignums() == before

    def test_empty_payload(self, renderer):
        artifact = renderer.export(_empty_payload(), "chart-snapshot", region_keys=["tasks_by_status"])
        assert artifact.content.startswith(b"%PDF")


# ===========================================================================
# PDF builder
# ===========================================================================
class TestPDFReportBuilder:

    def test_header_block(self):
        builder = PDFReportBuilder("Finance Report", company_name="Acme & Sons", generated_at=GENERATED_AT)
        html = builder.add_header_block().build_html()
        assert "Acme &amp; Sons" in html
        assert "Finance Report" in html
        assert "Generated on: 2024-06-15 09:30:00" in html

    def test_empty_table_keeps_header_row(self):
        html = PDFReportBuilder("T").add_table(["Name", "Amount"], []).build_html()
        assert "<th>Name</th>" in html
        assert "No records." in html

    def test_page_breaks(self):
        builder = PDFReportBuilder("T")
        builder.add_table(["A"], [["1"]]).add_page_break().add_table(["B"], [["2"]])
        assert builder.build_html().count('class="page-break"') == 1
