"""Pure aggregation functions turning typed records into summary statistics.

Nothing in this module performs I/O or mutates its input.  Empty input
always yields the zero-valued statistic, and every division guards its
denominator.
"""

from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from bizadmin.domain.records import (
    CLOSED_STAGES,
    Customer,
    CustomerStatus,
    Employee,
    EmployeeStatus,
    Expense,
    ExpenseStatus,
    Invoice,
    InvoiceStatus,
    Lead,
    LeadStatus,
    Opportunity,
    OpportunityStage,
    ProcurementRequest,
    ProcurementStatus,
    Project,
    StoredFile,
    Task,
)
from bizadmin.modules.reporting.stats import (
    ZERO,
    EmployeeStats,
    FileStats,
    FinanceStats,
    ProcurementStats,
    ProjectStats,
    SalesStats,
)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def _safe_div(numerator, denominator, default=0):
    """Safe division returning *default* when denominator is zero."""
    if not denominator:
        return default
    return numerator / denominator


def _count_by(values: Iterable[str]) -> dict[str, int]:
    return dict(Counter(values))


def _sum_by(pairs: Iterable[tuple[str, Decimal]]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for key, amount in pairs:
        totals[key] += amount
    return dict(totals)


def summarize_finance(
    invoices: Sequence[Invoice], expenses: Sequence[Expense]
) -> FinanceStats:
    """Revenue, expenses and profit.

    ``total_expenses`` counts every expense whatever its status, while
    ``net_profit`` is paid revenue minus that total and can go negative.
    """
    total_revenue = _sum(inv.amount for inv in invoices)
    paid_revenue = _sum(inv.amount for inv in invoices if inv.status == InvoiceStatus.PAID)
    total_expenses = _sum(exp.amount for exp in expenses)

    return FinanceStats(
        total_revenue=total_revenue,
        paid_revenue=paid_revenue,
        total_expenses=total_expenses,
        net_profit=paid_revenue - total_expenses,
        approved_expenses=_sum(
            exp.amount for exp in expenses if exp.status == ExpenseStatus.APPROVED
        ),
        pending_expenses=_sum(
            exp.amount for exp in expenses if exp.status == ExpenseStatus.PENDING
        ),
        invoice_count=len(invoices),
        expense_count=len(expenses),
        expenses_by_category=_sum_by((exp.category, exp.amount) for exp in expenses),
        invoices_by_status=_count_by(inv.status.value for inv in invoices),
    )


def summarize_employees(employees: Sequence[Employee]) -> EmployeeStats:
    """Headcount plus department and salary figures over active employees."""
    active = [emp for emp in employees if emp.status == EmployeeStatus.ACTIVE]
    total_salary = _sum(emp.salary or ZERO for emp in active)

    return EmployeeStats(
        total=len(employees),
        active=len(active),
        departments=_count_by(emp.department for emp in active),
        total_salary=total_salary,
        average_salary=_safe_div(total_salary, len(active), ZERO),
    )


def summarize_projects(
    projects: Sequence[Project],
    tasks: Sequence[Task],
    today: Optional[date] = None,
) -> ProjectStats:
    """Project status, task status and overdue counts.

    ``today`` defaults to the current local date; pass it explicitly to
    get reproducible overdue counts.
    """
    if today is None:
        today = date.today()

    return ProjectStats(
        total_projects=len(projects),
        projects_by_status=_count_by(p.status.value for p in projects),
        total_tasks=len(tasks),
        tasks_by_status=_count_by(t.status.value for t in tasks),
        overdue_tasks=sum(1 for t in tasks if t.is_overdue(today)),
        average_completion=float(
            _safe_div(sum(p.progress for p in projects), len(projects), 0)
        ),
        total_budget=_sum(p.budget for p in projects),
    )


def summarize_procurement(requests: Sequence[ProcurementRequest]) -> ProcurementStats:
    pending = [r for r in requests if r.status == ProcurementStatus.PENDING_APPROVAL]
    total_budget = _sum(r.estimated_amount for r in requests)

    return ProcurementStats(
        total=len(requests),
        pending=len(pending),
        approved=sum(1 for r in requests if r.status == ProcurementStatus.APPROVED),
        rejected=sum(1 for r in requests if r.status == ProcurementStatus.REJECTED),
        total_budget=total_budget,
        pending_budget=_sum(r.estimated_amount for r in pending),
        average_value=_safe_div(total_budget, len(requests), ZERO),
        by_category=_sum_by((r.category, r.estimated_amount) for r in requests),
    )


def summarize_files(files: Sequence[StoredFile]) -> FileStats:
    return FileStats(
        total=len(files),
        total_size=sum(f.size for f in files),
        types=_count_by(f.mimetype for f in files),
    )


def summarize_sales(
    leads: Sequence[Lead],
    customers: Sequence[Customer],
    opportunities: Sequence[Opportunity],
) -> SalesStats:
    """Lead funnel and opportunity pipeline figures."""
    open_opps = [o for o in opportunities if o.stage not in CLOSED_STAGES]
    converted = sum(1 for lead in leads if lead.status == LeadStatus.CONVERTED)

    return SalesStats(
        total_leads=len(leads),
        leads_by_status=_count_by(lead.status.value for lead in leads),
        total_customers=len(customers),
        active_customers=sum(1 for c in customers if c.status == CustomerStatus.ACTIVE),
        open_pipeline_value=_sum(o.amount for o in open_opps),
        won_value=_sum(
            o.amount for o in opportunities if o.stage == OpportunityStage.CLOSED_WON
        ),
        weighted_pipeline=_sum(o.amount * o.probability / 100 for o in open_opps),
        conversion_rate=float(_safe_div(converted * 100, len(leads), 0)),
    )
