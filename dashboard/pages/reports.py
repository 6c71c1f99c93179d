"""Reports & Analytics: Streamlit dashboard page."""

import logging
from typing import Any

import pandas as pd
import streamlit as st

from bizadmin.app import BizAdmin
from bizadmin.domain.errors import DomainError
from bizadmin.modules.reporting.assembler import ReportPayload
from bizadmin.modules.reporting.export_renderer import (
    build_employee_table,
    build_invoice_table,
    build_procurement_table,
    build_project_table,
)
from bizadmin.modules.reporting.widgets import ReportWidgets
from bizadmin.scheduler import CADENCE_TRIGGERS, SCHEDULE_FORMATS
from bizadmin.utils.formatting import format_money, format_number, format_percent, format_size

logger = logging.getLogger(__name__)

EXPORT_OPTIONS = [
    ("pdf", "PDF Report", "Full summary with record tables"),
    ("xlsx", "Spreadsheet", "Summary metrics as an Excel workbook"),
    ("csv", "CSV", "Summary metrics as comma-separated values"),
    ("chart-snapshot", "Chart Snapshot", "Every dashboard chart in one PDF"),
]

RECORD_REPORTS = ["employees", "invoices", "expenses", "projects", "procurement"]


# ---------------------------------------------------------------------------
# Lazy initializers
# ---------------------------------------------------------------------------


def _get_app() -> BizAdmin:
    """Lazy-initialize the application object in session state."""
    if "reports_app" not in st.session_state:
        biz = BizAdmin()
        biz.initialize(with_scheduler=True)
        st.session_state.reports_app = biz
    return st.session_state.reports_app


def _load_payload(force: bool = False) -> ReportPayload:
    """Assemble the report once per session, or again when *force* is set."""
    if force or "reports_payload" not in st.session_state:
        st.session_state.reports_payload = _get_app().summary(include_records=True)
    return st.session_state.reports_payload


def _frame(table, renderer) -> pd.DataFrame:
    return pd.DataFrame(renderer.format_rows(table), columns=table.headers)


# ===================================================================
# MAIN ENTRY POINT
# ===================================================================


def render_reports_page():
    """Render the Reports & Analytics dashboard page."""
    st.title("\U0001f4ca Reports & Analytics")
    st.markdown("Company-wide statistics, downloadable reports and scheduled delivery.")

    tabs = st.tabs([
        "\U0001f4ca Overview",
        "\U0001f4e5 Export Center",
        "\U0001f4c5 Scheduled Reports",
    ])

    with tabs[0]:
        _render_overview_tab()
    with tabs[1]:
        _render_export_tab()
    with tabs[2]:
        _render_scheduled_tab()


# ===================================================================
# TAB 1: Overview
# ===================================================================


def _render_overview_tab():
    """Metric cards and charts for every reporting section."""
    head_col, btn_col = st.columns([4, 1])
    with head_col:
        st.subheader("Overview")
    with btn_col:
        refresh = st.button("\U0001f504 Refresh", key="reports_refresh", use_container_width=True)

    with st.spinner("Assembling report..."):
        try:
            payload = _load_payload(force=refresh)
        except Exception as exc:
            logger.error("Report assembly failed: %s", exc)
            st.error("The report could not be assembled.")
            if st.button("Retry", key="reports_retry_all"):
                st.session_state.pop("reports_payload", None)
                st.rerun()
            return

    symbol = _get_app().report_config.currency_symbol
    st.caption("Generated " + payload.generated_at.strftime("%Y-%m-%d %H:%M") + " for " + payload.company_name)

    if payload.has_failures:
        ReportWidgets.failure_banner(payload.failures)
        if st.button("\U0001f501 Retry", key="reports_retry"):
            _load_payload(force=True)
            st.rerun()

    icons = ReportWidgets.SECTION_ICONS
    finance = payload.finance
    ReportWidgets.metric_row([
        ("Total Revenue", format_money(finance.total_revenue, symbol), icons["finance"]),
        ("Total Expenses", format_money(finance.total_expenses, symbol), icons["finance"]),
        ("Net Profit", format_money(finance.net_profit, symbol), icons["finance"]),
        ("Paid Revenue", format_money(finance.paid_revenue, symbol), icons["finance"]),
    ])
    ReportWidgets.metric_row([
        ("Active Employees", format_number(payload.employees.active), icons["employees"]),
        ("Projects", format_number(payload.projects.total_projects), icons["projects"]),
        ("Overdue Tasks", format_number(payload.projects.overdue_tasks), icons["projects"]),
        ("Pending Procurement", format_number(payload.procurement.pending), icons["procurement"]),
    ])
    ReportWidgets.metric_row([
        ("Open Pipeline", format_money(payload.sales.open_pipeline_value, symbol), icons["sales"]),
        ("Conversion Rate", format_percent(payload.sales.conversion_rate), icons["sales"]),
        ("Files", format_number(payload.files.total), icons["files"]),
        ("Storage Used", format_size(payload.files.total_size), icons["files"]),
    ])

    st.divider()

    col_a, col_b = st.columns(2)
    with col_a:
        ReportWidgets.bar_chart(
            {
                "revenue": finance.total_revenue,
                "expenses": finance.total_expenses,
                "net_profit": finance.net_profit,
            },
            "Finance Overview",
            value_label="Amount",
        )
    with col_b:
        ReportWidgets.donut_chart(finance.expenses_by_category, "Expenses by Category")

    col_c, col_d = st.columns(2)
    with col_c:
        ReportWidgets.bar_chart(payload.employees.departments, "Employees by Department")
    with col_d:
        ReportWidgets.donut_chart(payload.projects.projects_by_status, "Projects by Status")

    col_e, col_f = st.columns(2)
    with col_e:
        ReportWidgets.bar_chart(payload.projects.tasks_by_status, "Tasks by Status")
    with col_f:
        ReportWidgets.bar_chart(payload.sales.leads_by_status, "Leads by Status")

    st.divider()
    _render_record_tables(payload)


def _render_record_tables(payload: ReportPayload):
    records = payload.records
    if records is None:
        return

    renderer = _get_app().renderer()
    st.markdown("### Records")
    tables = [
        ("Employees", build_employee_table(records.employees)),
        ("Invoices", build_invoice_table(records.invoices)),
        ("Projects", build_project_table(records.projects)),
        ("Procurement", build_procurement_table(records.procurement)),
    ]
    for label, table in tables:
        with st.expander(label + " (" + str(len(table.rows)) + ")"):
            if not table.rows:
                st.info("No " + label.lower() + " recorded yet.")
            else:
                st.dataframe(_frame(table, renderer), use_container_width=True)


# ===================================================================
# TAB 2: Export Center
# ===================================================================


def _render_export_tab():
    """Download the summary or a record listing in any export format."""
    st.subheader("Export Center")
    biz = _get_app()

    st.markdown("### Company Summary")
    export_cols = st.columns(len(EXPORT_OPTIONS))
    for col, (fmt, label, help_text) in zip(export_cols, EXPORT_OPTIONS):
        with col:
            st.markdown("#### " + label)
            st.caption(help_text)
            report_type = "dashboard" if fmt == "chart-snapshot" else "summary"
            if st.button("Generate", key="reports_gen_" + fmt, use_container_width=True):
                with st.spinner("Rendering " + label + "..."):
                    try:
                        st.session_state["reports_artifact_" + fmt] = biz.export(fmt, report_type=report_type)
                    except DomainError as exc:
                        st.error(str(exc))
                    except Exception as exc:
                        logger.error("%s export failed: %s", fmt, exc)
                        st.error(label + " export failed.")
            artifact = st.session_state.get("reports_artifact_" + fmt)
            if artifact is not None:
                st.download_button(
                    label="Download " + artifact.filename,
                    data=artifact.content,
                    file_name=artifact.filename,
                    mime=artifact.media_type,
                    key="reports_dl_" + fmt,
                )

    st.divider()

    st.markdown("### Record Listings")
    with st.form("reports_records_form"):
        report_type = st.selectbox("Records", options=RECORD_REPORTS, key="reports_records_type")
        fmt = st.selectbox("Format", options=["pdf", "xlsx", "csv"], key="reports_records_fmt")
        submitted = st.form_submit_button("Generate")

    if submitted:
        try:
            st.session_state.reports_records_artifact = biz.export(fmt, report_type=report_type)
        except DomainError as exc:
            st.error(str(exc))
        except Exception as exc:
            logger.error("Record export failed: %s", exc)
            st.error("Export failed.")

    artifact = st.session_state.get("reports_records_artifact")
    if artifact is not None:
        st.download_button(
            label="Download " + artifact.filename,
            data=artifact.content,
            file_name=artifact.filename,
            mime=artifact.media_type,
            key="reports_dl_records",
        )

    st.divider()

    st.markdown("### Export History")
    try:
        history = biz.recent_exports(limit=20)
    except Exception as exc:
        logger.warning("Failed to load export history: %s", exc)
        st.info("Export history is not available.")
        return

    if not history:
        st.info("No exports yet. Generated files will appear here.")
        return

    rows: list[dict[str, Any]] = [
        {
            "Created": (item["created_at"] or "")[:16].replace("T", " "),
            "Type": item["report_type"],
            "Format": item["format"],
            "File": item["filename"],
            "Size": format_size(item["size_bytes"] or 0),
        }
        for item in history
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True)


# ===================================================================
# TAB 3: Scheduled Reports
# ===================================================================


def _render_scheduled_tab():
    """Set up and manage recurring e-mailed reports."""
    st.subheader("Scheduled Reports")
    biz = _get_app()

    with st.expander("Create New Report Schedule", expanded=False):
        with st.form("reports_schedule_form"):
            cadence = st.selectbox("Cadence", options=list(CADENCE_TRIGGERS), key="reports_sched_cadence")
            fmt = st.selectbox("Report Format", options=list(SCHEDULE_FORMATS), key="reports_sched_fmt")
            recipients = st.text_input(
                "Recipients",
                placeholder="ceo@example.com, finance@example.com",
                key="reports_sched_recipients",
            )
            submitted = st.form_submit_button("Create Schedule")

            if submitted:
                try:
                    result = biz.schedule_report(cadence, recipients.split(","), fmt)
                    st.success(
                        "Report schedule created! Cadence: " + result["cadence"]
                        + " | Recipients: " + ", ".join(result["recipients"])
                    )
                    logger.info("Scheduled report created: %s", result["job_id"])
                except DomainError as exc:
                    st.error(str(exc))

    st.markdown("### Existing Report Schedules")
    try:
        schedules = biz.list_schedules()
    except Exception as exc:
        logger.warning("Failed to list schedules: %s", exc)
        st.info("Could not load scheduled reports.")
        return

    if not schedules:
        st.info("No scheduled reports configured. Create one above to get started.")
        return

    for sched in schedules:
        col_info, col_action = st.columns([4, 1])
        with col_info:
            next_run = sched.get("next_run_time") or "not scheduled"
            st.markdown(
                "**" + sched["cadence"].title() + "** | "
                + sched["format"].upper() + " | "
                + ", ".join(sched["recipients"])
                + " | Next run: " + str(next_run)
                + ("" if sched["active"] else " | *cancelled*")
            )
        with col_action:
            if sched["active"] and st.button("Cancel", key="reports_sched_cancel_" + str(sched["id"])):
                try:
                    biz.scheduler.cancel_schedule(sched["id"])
                    st.rerun()
                except DomainError as exc:
                    st.error(str(exc))
