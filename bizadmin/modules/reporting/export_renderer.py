"""Export renderer: turns report payloads and record lists into downloadable files.

Formats:
    pdf             tabular document (xhtml2pdf)
    xlsx            single-sheet spreadsheet (openpyxl)
    chart-snapshot  title page + one rasterised chart per page (matplotlib + xhtml2pdf)
    csv             header row + data rows

Every artifact is named ``<report-type>_<YYYY-MM-DD>.<ext>`` and carries
the generation timestamp in its body.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from bizadmin.config import ReportConfig
from bizadmin.domain.errors import ExportError
from bizadmin.domain.records import (
    Employee,
    Expense,
    Invoice,
    ProcurementRequest,
    Project,
)
from bizadmin.modules.reporting.assembler import SECTION_NAMES, ReportPayload
from bizadmin.modules.reporting.charts import ChartRegistry
from bizadmin.utils.formatting import (
    format_date,
    format_money,
    format_percent,
    format_size,
    humanize,
    slugify,
)
from bizadmin.utils.pdf_report_builder import PDFReportBuilder

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "xlsx", "chart-snapshot", "csv")

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "chart-snapshot": "application/pdf",
    "csv": "text/csv",
}

EXTENSIONS = {"pdf": "pdf", "xlsx": "xlsx", "chart-snapshot": "pdf", "csv": "csv"}

SPREADSHEET_COLUMN_WIDTH = 15


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content: bytes
    media_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Column:
    header: str
    kind: str = "text"  # text | money | date | percent


@dataclass
class ReportTable:
    """A titled table with typed columns; cells keep their raw values."""

    title: str
    columns: Sequence[Column]
    rows: list[tuple] = field(default_factory=list)

    @property
    def headers(self) -> list[str]:
        return [col.header for col in self.columns]


# ---------------------------------------------------------------------------
# Table builders
# ---------------------------------------------------------------------------

def build_employee_table(employees: Iterable[Employee]) -> ReportTable:
    return ReportTable(
        title="Employees",
        columns=[
            Column("Name"),
            Column("Email"),
            Column("Position"),
            Column("Department"),
            Column("Salary", "money"),
            Column("Start Date", "date"),
            Column("Status"),
        ],
        rows=[
            (e.full_name, e.email, e.position, e.department, e.salary, e.hire_date, e.status)
            for e in employees
        ],
    )


def build_invoice_table(invoices: Iterable[Invoice]) -> ReportTable:
    return ReportTable(
        title="Invoices",
        columns=[
            Column("Invoice #"),
            Column("Client"),
            Column("Amount", "money"),
            Column("Status"),
            Column("Due Date", "date"),
        ],
        rows=[
            (i.invoice_number, i.client_name, i.amount, i.status, i.due_date)
            for i in invoices
        ],
    )


def build_expense_table(expenses: Iterable[Expense]) -> ReportTable:
    return ReportTable(
        title="Expenses",
        columns=[
            Column("Description"),
            Column("Category"),
            Column("Amount", "money"),
            Column("Date", "date"),
            Column("Status"),
        ],
        rows=[
            (x.description, x.category, x.amount, x.expense_date, x.status)
            for x in expenses
        ],
    )


def build_project_table(projects: Iterable[Project]) -> ReportTable:
    return ReportTable(
        title="Projects",
        columns=[
            Column("Name"),
            Column("Status"),
            Column("Priority"),
            Column("Progress", "percent"),
            Column("Budget", "money"),
        ],
        rows=[(p.name, p.status, p.priority, p.progress, p.budget) for p in projects],
    )


def build_procurement_table(requests: Iterable[ProcurementRequest]) -> ReportTable:
    return ReportTable(
        title="Procurement Requests",
        columns=[
            Column("Title"),
            Column("Department"),
            Column("Category"),
            Column("Amount", "money"),
            Column("Status"),
        ],
        rows=[
            (r.title, r.department, r.category, r.estimated_amount, r.status)
            for r in requests
        ],
    )


TABLE_BUILDERS: dict[type, Callable[[Iterable[Any]], ReportTable]] = {
    Employee: build_employee_table,
    Invoice: build_invoice_table,
    Expense: build_expense_table,
    Project: build_project_table,
    ProcurementRequest: build_procurement_table,
}

# report_type -> builder, used when a record list is empty
REPORT_TYPE_BUILDERS = {
    "employees": build_employee_table,
    "invoices": build_invoice_table,
    "expenses": build_expense_table,
    "projects": build_project_table,
    "procurement": build_procurement_table,
}


def _summary_rows(payload: ReportPayload, name: str, config: ReportConfig) -> list[tuple]:
    money = lambda value: format_money(value, config.currency_symbol)  # noqa: E731

    if name == "employees":
        s = payload.employees
        rows = [
            ("Total Employees", s.total),
            ("Active Employees", s.active),
            ("Total Salary (active)", money(s.total_salary)),
            ("Average Salary", money(s.average_salary)),
        ]
        rows += [(f"Department: {dept}", count) for dept, count in sorted(s.departments.items())]
    elif name == "finance":
        s = payload.finance
        rows = [
            ("Total Revenue", money(s.total_revenue)),
            ("Paid Revenue", money(s.paid_revenue)),
            ("Total Expenses", money(s.total_expenses)),
            ("Net Profit", money(s.net_profit)),
            ("Approved Expenses", money(s.approved_expenses)),
            ("Pending Expenses", money(s.pending_expenses)),
            ("Invoices", s.invoice_count),
            ("Expenses", s.expense_count),
        ]
        rows += [
            (f"Category: {humanize(cat)}", money(total))
            for cat, total in sorted(s.expenses_by_category.items())
        ]
    elif name == "procurement":
        s = payload.procurement
        rows = [
            ("Total Requests", s.total),
            ("Pending Approval", s.pending),
            ("Approved", s.approved),
            ("Rejected", s.rejected),
            ("Total Budget", money(s.total_budget)),
            ("Pending Budget", money(s.pending_budget)),
            ("Average Value", money(s.average_value)),
        ]
    elif name == "projects":
        s = payload.projects
        rows = [
            ("Total Projects", s.total_projects),
            ("Total Tasks", s.total_tasks),
            ("Overdue Tasks", s.overdue_tasks),
            ("Average Completion", format_percent(s.average_completion)),
            ("Total Budget", money(s.total_budget)),
        ]
        rows += [
            (f"Tasks {humanize(status)}", count)
            for status, count in sorted(s.tasks_by_status.items())
        ]
    elif name == "files":
        s = payload.files
        rows = [("Total Files", s.total), ("Total Size", format_size(s.total_size))]
        rows += [(f"Type: {mime}", count) for mime, count in sorted(s.types.items())]
    elif name == "sales":
        s = payload.sales
        rows = [
            ("Total Leads", s.total_leads),
            ("Conversion Rate", format_percent(s.conversion_rate)),
            ("Total Customers", s.total_customers),
            ("Active Customers", s.active_customers),
            ("Open Pipeline", money(s.open_pipeline_value)),
            ("Weighted Pipeline", money(s.weighted_pipeline)),
            ("Won Value", money(s.won_value)),
        ]
    else:
        raise KeyError(name)

    if name in payload.failures:
        rows.insert(0, ("Status", "Data unavailable"))
    return rows


def build_summary_sections(
    payload: ReportPayload, config: Optional[ReportConfig] = None
) -> list[ReportTable]:
    """One Metric/Value table per payload section."""
    config = config or ReportConfig()
    return [
        ReportTable(
            title=humanize(name),
            columns=[Column("Metric"), Column("Value")],
            rows=_summary_rows(payload, name, config),
        )
        for name in SECTION_NAMES
    ]


def build_summary_table(
    payload: ReportPayload, config: Optional[ReportConfig] = None
) -> ReportTable:
    """Every section flattened into a single Section/Metric/Value table."""
    rows = []
    for section in build_summary_sections(payload, config):
        rows.extend((section.title, metric, value) for metric, value in section.rows)
    return ReportTable(
        title="Summary",
        columns=[Column("Section"), Column("Metric"), Column("Value")],
        rows=rows,
    )


def build_record_sections(payload: ReportPayload) -> list[ReportTable]:
    if payload.records is None:
        return []
    records = payload.records
    return [
        build_employee_table(records.employees),
        build_invoice_table(records.invoices),
        build_expense_table(records.expenses),
        build_project_table(records.projects),
        build_procurement_table(records.procurement),
    ]


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class ExportRenderer:
    """Renders report tables and payloads into :class:`ExportArtifact` files."""

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        charts: Optional[ChartRegistry] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or ReportConfig()
        self.charts = charts or ChartRegistry()
        self._clock = clock

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def export(
        self,
        source: ReportPayload | Sequence[Any],
        fmt: str,
        report_type: str = "summary",
        title: Optional[str] = None,
        region_keys: Optional[Sequence[str]] = None,
    ) -> ExportArtifact:
        """Export a payload or a list of typed records in format *fmt*."""
        if fmt not in EXPORT_FORMATS:
            raise ExportError(
                f"Unsupported export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}"
            )
        title = title or f"{humanize(report_type)} Report"

        if isinstance(source, ReportPayload):
            generated_at = source.generated_at
            if fmt == "chart-snapshot":
                keys = list(region_keys) if region_keys is not None else self.charts.keys()
                return self.render_chart_snapshot(keys, title, source, report_type=report_type)
            if fmt == "pdf":
                sections = build_summary_sections(source, self.config) + build_record_sections(source)
                return self.render_pdf(title, sections, report_type, generated_at=generated_at)
            table = build_summary_table(source, self.config)
        else:
            if fmt == "chart-snapshot":
                raise ExportError("chart-snapshot export needs a report payload, not records")
            generated_at = None
            table = self._table_for_records(list(source), report_type)
            if fmt == "pdf":
                return self.render_pdf(title, [table], report_type)

        if fmt == "xlsx":
            return self.render_spreadsheet(title, table, report_type, generated_at=generated_at)
        return self.render_csv(title, table, report_type, generated_at=generated_at)

    def _table_for_records(self, records: list, report_type: str) -> ReportTable:
        if records:
            builder = TABLE_BUILDERS.get(type(records[0]))
            if builder is None:
                raise ExportError(f"No table layout for {type(records[0]).__name__} records")
        else:
            builder = REPORT_TYPE_BUILDERS.get(report_type)
            if builder is None:
                raise ExportError(f"No table layout for report type {report_type!r}")
        return builder(records)

    # ------------------------------------------------------------------
    # PDF (tabular)
    # ------------------------------------------------------------------

    def render_pdf(
        self,
        title: str,
        sections: Sequence[ReportTable],
        report_type: str,
        generated_at: Optional[datetime] = None,
    ) -> ExportArtifact:
        """Header block, then one table per section, each section on its own page."""
        generated_at = generated_at or self._clock()
        builder = self._pdf_builder(title, generated_at)
        builder.add_header_block()
        for idx, table in enumerate(sections):
            if idx > 0:
                builder.add_page_break()
            builder.add_heading(table.title)
            builder.add_table(table.headers, self.format_rows(table))
        content = self._build_pdf(builder, report_type)
        return self._artifact("pdf", report_type, content, generated_at)

    # ------------------------------------------------------------------
    # Spreadsheet
    # ------------------------------------------------------------------

    def render_spreadsheet(
        self,
        title: str,
        table: ReportTable,
        report_type: str,
        generated_at: Optional[datetime] = None,
    ) -> ExportArtifact:
        """One sheet: company, title, timestamp, blank row, header row, data rows."""
        generated_at = generated_at or self._clock()

        wb = Workbook()
        ws = wb.active
        ws.title = _sheet_title(table.title or title)

        ws.cell(row=1, column=1, value=self.config.company_name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=title).font = Font(bold=True)
        ws.cell(row=3, column=1, value=self._generated_label(generated_at))

        for col_idx, header in enumerate(table.headers, 1):
            ws.cell(row=5, column=col_idx, value=header).font = Font(bold=True)

        for row_idx, row in enumerate(table.rows, 6):
            for col_idx, (column, value) in enumerate(zip(table.columns, row), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=self._sheet_value(value, column))
                if column.kind == "money" and value is not None:
                    cell.number_format = f'"{self.config.currency_symbol}"#,##0.00'
                elif column.kind == "date" and value is not None:
                    cell.number_format = "mm/dd/yyyy"

        for col_idx in range(1, max(len(table.columns), 1) + 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = SPREADSHEET_COLUMN_WIDTH

        buf = io.BytesIO()
        wb.save(buf)
        return self._artifact("xlsx", report_type, buf.getvalue(), generated_at)

    @staticmethod
    def _sheet_value(value: Any, column: Column) -> Any:
        if value is None:
            return None
        if isinstance(value, Enum):
            return humanize(str(value.value))
        if column.kind in ("money", "date", "percent"):
            return value
        return str(value) if not isinstance(value, (int, float, Decimal)) else value

    # ------------------------------------------------------------------
    # Chart snapshot
    # ------------------------------------------------------------------

    def render_chart_snapshot(
        self,
        region_keys: Sequence[str],
        title: str,
        payload: ReportPayload,
        report_type: str = "dashboard",
    ) -> ExportArtifact:
        """Title page plus one full-width chart per page.

        Unknown keys and regions that fail to render are skipped with a
        warning; the remaining regions are still exported.
        """
        generated_at = payload.generated_at
        builder = self._pdf_builder(title, generated_at)
        builder.add_title_page(subtitle=f"{len(region_keys)} chart region(s) requested")

        rendered = 0
        for key in region_keys:
            if key not in self.charts:
                logger.warning("Chart region %r not found, skipping", key)
                continue
            try:
                png = PDFReportBuilder.fig_to_png(self.charts.build(key, payload))
            except Exception as exc:
                logger.warning("Chart region %r failed to render, skipping: %s", key, exc)
                continue
            builder.add_page_break()
            builder.add_image(png, caption=self.charts.title(key))
            rendered += 1

        logger.info("Chart snapshot: %d of %d regions rendered", rendered, len(region_keys))
        content = self._build_pdf(builder, report_type)
        return self._artifact("chart-snapshot", report_type, content, generated_at)

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def render_csv(
        self,
        title: str,
        table: ReportTable,
        report_type: str,
        generated_at: Optional[datetime] = None,
    ) -> ExportArtifact:
        """Same header block as the spreadsheet (company, title, timestamp, blank row), then the table."""
        generated_at = generated_at or self._clock()
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow([self.config.company_name])
        writer.writerow([title])
        writer.writerow([self._generated_label(generated_at)])
        writer.writerow([])
        writer.writerow(table.headers)
        writer.writerows(self.format_rows(table))
        return self._artifact("csv", report_type, buf.getvalue().encode("utf-8"), generated_at)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def format_cell(self, value: Any, kind: str = "text") -> str:
        """Display string for one cell."""
        if value is None:
            return ""
        if isinstance(value, Enum):
            return humanize(str(value.value))
        if kind == "money":
            return format_money(value, self.config.currency_symbol)
        if kind == "date" and isinstance(value, (date, datetime)):
            return format_date(value, self.config.date_format)
        if kind == "percent":
            return f"{value}%"
        return str(value)

    def format_rows(self, table: ReportTable) -> list[list[str]]:
        return [
            [self.format_cell(value, column.kind) for column, value in zip(table.columns, row)]
            for row in table.rows
        ]

    def filename(self, fmt: str, report_type: str, generated_at: datetime) -> str:
        stem = slugify(report_type) or "report"
        return f"{stem}_{generated_at:%Y-%m-%d}.{EXTENSIONS[fmt]}"

    def _generated_label(self, generated_at: datetime) -> str:
        return f"Generated on: {generated_at.strftime(self.config.timestamp_format)}"

    def _pdf_builder(self, title: str, generated_at: datetime) -> PDFReportBuilder:
        return PDFReportBuilder(
            title,
            company_name=self.config.company_name,
            generated_at=generated_at,
            timestamp_format=self.config.timestamp_format,
        )

    @staticmethod
    def _build_pdf(builder: PDFReportBuilder, report_type: str) -> bytes:
        try:
            return builder.build_pdf_bytes()
        except RuntimeError as exc:
            raise ExportError(f"Could not render {report_type} PDF: {exc}") from exc

    def _artifact(
        self, fmt: str, report_type: str, content: bytes, generated_at: datetime
    ) -> ExportArtifact:
        artifact = ExportArtifact(
            filename=self.filename(fmt, report_type, generated_at),
            content=content,
            media_type=MEDIA_TYPES[fmt],
        )
        logger.info("Export complete: %s (%d bytes)", artifact.filename, artifact.size)
        return artifact


def _sheet_title(title: str) -> str:
    cleaned = "".join(ch for ch in title if ch not in '[]:*?/\\')
    return (cleaned or "Report")[:31]
