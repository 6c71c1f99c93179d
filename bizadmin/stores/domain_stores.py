"""Concrete record stores, one per business entity."""

from datetime import date
from typing import Optional

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
    Priority,
    ProcurementRequest,
    ProcurementStatus,
    Project,
    ProjectStatus,
    StoredFile,
    Task,
    TaskStatus,
)
from bizadmin.models import (
    CustomerRow,
    EmployeeRow,
    ExpenseRow,
    InvoiceRow,
    LeadRow,
    OpportunityRow,
    ProcurementRequestRow,
    ProjectRow,
    StoredFileRow,
    TaskRow,
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
from bizadmin.stores import validation as v
from bizadmin.stores.base import RecordStore


# ---------------------------------------------------------------------------
# HR
# ---------------------------------------------------------------------------

class EmployeeStore(RecordStore[Employee]):
    kind = "employee"
    model = EmployeeRow
    record_type = Employee
    schema = {
        "first_name": v.text(100),
        "last_name": v.text(100),
        "email": v.email(),
        "department": v.text(100),
        "position": v.text(100, required=False),
        "status": v.choice(EmployeeStatus),
        "salary": v.money(required=False),
        "hire_date": v.day(),
    }
    required = frozenset({"first_name", "last_name", "email", "department"})

    def stats(self) -> EmployeeStats:
        return summarize_employees(self.list())


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------

class InvoiceStore(RecordStore[Invoice]):
    kind = "invoice"
    model = InvoiceRow
    record_type = Invoice
    schema = {
        "invoice_number": v.text(50),
        "client_name": v.text(255),
        "amount": v.money(),
        "status": v.choice(InvoiceStatus),
        "issue_date": v.day(),
        "due_date": v.day(),
    }
    required = frozenset({"invoice_number", "client_name", "amount"})

    def stats(self) -> FinanceStats:
        return summarize_finance(self.list(), ExpenseStore().list())


class ExpenseStore(RecordStore[Expense]):
    kind = "expense"
    model = ExpenseRow
    record_type = Expense
    schema = {
        "description": v.text(2000),
        "category": v.text(100),
        "amount": v.money(),
        "status": v.choice(ExpenseStatus),
        "expense_date": v.day(),
        "owner": v.text(255, required=False),
    }
    required = frozenset({"description", "amount"})

    def stats(self) -> FinanceStats:
        return summarize_finance(InvoiceStore().list(), self.list())


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class ProjectStore(RecordStore[Project]):
    kind = "project"
    model = ProjectRow
    record_type = Project
    schema = {
        "name": v.text(255),
        "status": v.choice(ProjectStatus),
        "priority": v.choice(Priority),
        "progress": v.integer(0, 100),
        "budget": v.money(),
        "start_date": v.day(),
        "end_date": v.day(),
    }
    required = frozenset({"name"})

    def stats(self, today: Optional[date] = None) -> ProjectStats:
        return summarize_projects(self.list(), TaskStore().list(), today=today)


class TaskStore(RecordStore[Task]):
    kind = "task"
    model = TaskRow
    record_type = Task
    schema = {
        "project_id": v.optional_integer(),
        "title": v.text(255),
        "status": v.choice(TaskStatus),
        "priority": v.choice(Priority),
        "due_date": v.day(),
    }
    required = frozenset({"title"})

    def stats(self, today: Optional[date] = None) -> ProjectStats:
        return summarize_projects(ProjectStore().list(), self.list(), today=today)

    def for_project(self, project_id: int) -> list[Task]:
        return self.filter(project_id=project_id)


# ---------------------------------------------------------------------------
# Procurement
# ---------------------------------------------------------------------------

class ProcurementStore(RecordStore[ProcurementRequest]):
    kind = "procurement request"
    model = ProcurementRequestRow
    record_type = ProcurementRequest
    schema = {
        "title": v.text(255),
        "department": v.text(100, required=False),
        "category": v.text(100),
        "estimated_amount": v.money(),
        "status": v.choice(ProcurementStatus),
        "priority": v.choice(Priority),
    }
    required = frozenset({"title", "estimated_amount"})

    def stats(self) -> ProcurementStats:
        return summarize_procurement(self.list())


# ---------------------------------------------------------------------------
# Sales CRM
# ---------------------------------------------------------------------------

class _SalesStore:
    def stats(self) -> SalesStats:
        return summarize_sales(LeadStore().list(), CustomerStore().list(), OpportunityStore().list())


class LeadStore(_SalesStore, RecordStore[Lead]):
    kind = "lead"
    model = LeadRow
    record_type = Lead
    schema = {
        "name": v.text(255),
        "company": v.text(255, required=False),
        "status": v.choice(LeadStatus),
        "estimated_value": v.money(),
    }
    required = frozenset({"name"})


class CustomerStore(_SalesStore, RecordStore[Customer]):
    kind = "customer"
    model = CustomerRow
    record_type = Customer
    schema = {
        "name": v.text(255),
        "email": v.text(255, required=False),
        "status": v.choice(CustomerStatus),
    }
    required = frozenset({"name"})


class OpportunityStore(_SalesStore, RecordStore[Opportunity]):
    kind = "opportunity"
    model = OpportunityRow
    record_type = Opportunity
    schema = {
        "name": v.text(255),
        "stage": v.choice(OpportunityStage),
        "amount": v.money(),
        "probability": v.integer(0, 100),
    }
    required = frozenset({"name"})


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class FileStore(RecordStore[StoredFile]):
    kind = "file"
    model = StoredFileRow
    record_type = StoredFile
    schema = {
        "original_name": v.text(500),
        "mimetype": v.text(255),
        "size": v.integer(0),
        "category": v.text(100, required=False),
        "uploaded_at": v.timestamp(),
    }
    required = frozenset({"original_name", "mimetype", "size"})

    def stats(self) -> FileStats:
        return summarize_files(self.list())
