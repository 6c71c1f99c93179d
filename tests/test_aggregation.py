"""Tests for the pure aggregation functions."""

from datetime import date
from decimal import Decimal

import pytest

from bizadmin.domain.records import (
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
    ProjectStatus,
    StoredFile,
    Task,
    TaskStatus,
)
from bizadmin.modules.reporting.aggregation import (
    summarize_employees,
    summarize_files,
    summarize_finance,
    summarize_procurement,
    summarize_projects,
    summarize_sales,
)
from bizadmin.modules.reporting.stats import (
    EmployeeStats,
    FileStats,
    FinanceStats,
    ProcurementStats,
    ProjectStats,
    SalesStats,
)


# ===========================================================================
# Finance
# ===========================================================================
class TestSummarizeFinance:

    def test_paid_draft_and_expense(self):
        invoices = [
            Invoice(amount=Decimal("1000"), status=InvoiceStatus.PAID),
            Invoice(amount=Decimal("500"), status=InvoiceStatus.DRAFT),
        ]
        expenses = [Expense(amount=Decimal("300"))]

        stats = summarize_finance(invoices, expenses)

        assert stats.total_revenue == Decimal("1500")
        assert stats.paid_revenue == Decimal("1000")
        assert stats.total_expenses == Decimal("300")
        assert stats.net_profit == Decimal("700")
        assert stats.paid_revenue <= stats.total_revenue

    def test_net_profit_can_be_negative(self):
        invoices = [Invoice(amount=Decimal("100"), status=InvoiceStatus.PAID)]
        expenses = [Expense(amount=Decimal("800"))]
        assert summarize_finance(invoices, expenses).net_profit == Decimal("-700")

    def test_expenses_counted_regardless_of_status(self):
        expenses = [
            Expense(amount=Decimal("10"), status=ExpenseStatus.PENDING),
            Expense(amount=Decimal("20"), status=ExpenseStatus.APPROVED),
            Expense(amount=Decimal("40"), status=ExpenseStatus.REJECTED),
        ]
        stats = summarize_finance([], expenses)
        assert stats.total_expenses == Decimal("70")
        assert stats.approved_expenses == Decimal("20")
        assert stats.pending_expenses == Decimal("10")
        assert stats.expense_count == 3

    def test_breakdowns(self):
        invoices = [
            Invoice(amount=Decimal("1"), status=InvoiceStatus.PAID),
            Invoice(amount=Decimal("2"), status=InvoiceStatus.PAID),
            Invoice(amount=Decimal("3"), status=InvoiceStatus.OVERDUE),
        ]
        expenses = [
            Expense(category="travel", amount=Decimal("5.50")),
            Expense(category="travel", amount=Decimal("4.50")),
            Expense(category="office", amount=Decimal("1")),
        ]
        stats = summarize_finance(invoices, expenses)
        assert stats.invoices_by_status == {"paid": 2, "overdue": 1}
        assert stats.expenses_by_category == {"travel": Decimal("10.00"), "office": Decimal("1")}
        assert stats.invoice_count == 3

    def test_empty_is_zero(self):
        assert summarize_finance([], []) == FinanceStats.zero()


# ===========================================================================
# Employees
# ===========================================================================
class TestSummarizeEmployees:

    def test_active_only_salary_and_departments(self):
        employees = [
            Employee(department="Eng", status=EmployeeStatus.ACTIVE, salary=Decimal("1000")),
            Employee(department="Eng", status=EmployeeStatus.INACTIVE, salary=Decimal("2000")),
        ]
        stats = summarize_employees(employees)
        assert stats.total == 2
        assert stats.active == 1
        assert stats.departments == {"Eng": 1}
        assert stats.total_salary == Decimal("1000")
        assert stats.average_salary == Decimal("1000")

    def test_missing_salary_counts_as_zero(self):
        employees = [
            Employee(department="Ops", salary=Decimal("3000")),
            Employee(department="Ops", salary=None),
        ]
        stats = summarize_employees(employees)
        assert stats.total_salary == Decimal("3000")
        assert stats.average_salary == Decimal("1500")
        assert stats.average_salary * stats.active == stats.total_salary

    def test_no_active_employees(self):
        employees = [Employee(department="Eng", status=EmployeeStatus.TERMINATED, salary=Decimal("900"))]
        stats = summarize_employees(employees)
        assert stats.active == 0
        assert stats.average_salary == 0
        assert stats.departments == {}

    def test_empty_is_zero(self):
        assert summarize_employees([]) == EmployeeStats.zero()


# ===========================================================================
# Projects
# ===========================================================================
class TestSummarizeProjects:

    def test_average_completion_without_tasks(self):
        projects = [Project(progress=40), Project(progress=80)]
        stats = summarize_projects(projects, [], today=date(2024, 1, 1))
        assert stats.average_completion == 60
        assert stats.tasks_by_status == {}
        assert stats.total_tasks == 0

    def test_empty_projects_average_is_zero(self):
        assert summarize_projects([], [], today=date(2024, 1, 1)).average_completion == 0

    def test_overdue_tasks_use_injected_today(self):
        today = date(2024, 6, 15)
        tasks = [
            Task(status=TaskStatus.TODO, due_date=date(2024, 6, 14)),
            Task(status=TaskStatus.IN_PROGRESS, due_date=date(2024, 6, 1)),
            Task(status=TaskStatus.DONE, due_date=date(2024, 6, 1)),
            Task(status=TaskStatus.CANCELLED, due_date=date(2024, 6, 1)),
            Task(status=TaskStatus.TODO, due_date=today),
            Task(status=TaskStatus.TODO, due_date=None),
        ]
        stats = summarize_projects([], tasks, today=today)
        assert stats.overdue_tasks == 2
        assert stats.tasks_by_status == {"todo": 3, "in_progress": 1, "done": 1, "cancelled": 1}

    def test_status_counts_and_budget(self):
        projects = [
            Project(status=ProjectStatus.IN_PROGRESS, budget=Decimal("100.50")),
            Project(status=ProjectStatus.IN_PROGRESS, budget=Decimal("200")),
            Project(status=ProjectStatus.COMPLETED, progress=100),
        ]
        stats = summarize_projects(projects, [], today=date(2024, 1, 1))
        assert stats.projects_by_status == {"in_progress": 2, "completed": 1}
        assert stats.total_budget == Decimal("300.50")
        assert stats.total_projects == 3

    def test_empty_is_zero(self):
        assert summarize_projects([], [], today=date(2024, 1, 1)) == ProjectStats.zero()


# ===========================================================================
# Procurement
# ===========================================================================
class TestSummarizeProcurement:

    def test_counts_and_budgets(self):
        requests = [
            ProcurementRequest(category="hardware", estimated_amount=Decimal("800"),
                               status=ProcurementStatus.PENDING_APPROVAL),
            ProcurementRequest(category="hardware", estimated_amount=Decimal("100"),
                               status=ProcurementStatus.PENDING_APPROVAL),
            ProcurementRequest(category="software", estimated_amount=Decimal("200"),
                               status=ProcurementStatus.APPROVED),
            ProcurementRequest(category="software", estimated_amount=Decimal("50"),
                               status=ProcurementStatus.REJECTED),
        ]
        stats = summarize_procurement(requests)
        assert stats.total == 4
        assert stats.pending == 2
        assert stats.approved == 1
        assert stats.rejected == 1
        assert stats.total_budget == Decimal("1150")
        assert stats.pending_budget == Decimal("900")
        assert stats.average_value == Decimal("287.5")
        assert stats.by_category == {"hardware": Decimal("900"), "software": Decimal("250")}

    def test_empty_is_zero(self):
        assert summarize_procurement([]) == ProcurementStats.zero()


# ===========================================================================
# Files and sales
# ===========================================================================
class TestSummarizeFiles:

    def test_sizes_and_types(self):
        files = [
            StoredFile(mimetype="application/pdf", size=100),
            StoredFile(mimetype="application/pdf", size=50),
            StoredFile(mimetype="image/png", size=10),
        ]
        stats = summarize_files(files)
        assert stats.total == 3
        assert stats.total_size == 160
        assert stats.types == {"application/pdf": 2, "image/png": 1}

    def test_empty_is_zero(self):
        assert summarize_files([]) == FileStats.zero()


class TestSummarizeSales:

    def test_pipeline_and_conversion(self):
        leads = [
            Lead(status=LeadStatus.CONVERTED),
            Lead(status=LeadStatus.NEW),
            Lead(status=LeadStatus.LOST),
            Lead(status=LeadStatus.NEW),
        ]
        customers = [
            Customer(status=CustomerStatus.ACTIVE),
            Customer(status=CustomerStatus.CHURNED),
        ]
        opportunities = [
            Opportunity(stage=OpportunityStage.PROPOSAL, amount=Decimal("1000"), probability=50),
            Opportunity(stage=OpportunityStage.NEGOTIATION, amount=Decimal("200"), probability=25),
            Opportunity(stage=OpportunityStage.CLOSED_WON, amount=Decimal("400"), probability=100),
            Opportunity(stage=OpportunityStage.CLOSED_LOST, amount=Decimal("900"), probability=0),
        ]
        stats = summarize_sales(leads, customers, opportunities)
        assert stats.total_leads == 4
        assert stats.leads_by_status == {"converted": 1, "new": 2, "lost": 1}
        assert stats.total_customers == 2
        assert stats.active_customers == 1
        assert stats.open_pipeline_value == Decimal("1200")
        assert stats.won_value == Decimal("400")
        assert stats.weighted_pipeline == Decimal("550")
        assert stats.conversion_rate == pytest.approx(25.0)

    def test_empty_is_zero(self):
        assert summarize_sales([], [], []) == SalesStats.zero()


# ===========================================================================
# Stats serialisation
# ===========================================================================
class TestStatsToDict:

    def test_decimals_become_rounded_floats(self):
        stats = FinanceStats(total_revenue=Decimal("10.555"), expenses_by_category={"a": Decimal("1.1")})
        data = stats.to_dict()
        assert data["total_revenue"] == pytest.approx(10.56, abs=0.01)
        assert data["expenses_by_category"] == {"a": 1.1}
        assert data["invoice_count"] == 0

    def test_inputs_not_mutated(self):
        invoices = [Invoice(amount=Decimal("5"), status=InvoiceStatus.PAID)]
        snapshot = list(invoices)
        summarize_finance(invoices, [])
        assert invoices == snapshot
