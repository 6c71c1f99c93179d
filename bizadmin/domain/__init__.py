"""Typed domain records and errors."""

from bizadmin.domain.errors import (
    DomainError,
    ExportError,
    FetchError,
    RecordNotFoundError,
    RecordValidationError,
    ScheduleError,
)
from bizadmin.domain.records import (
    Customer,
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
    CustomerStatus,
)

__all__ = [
    "DomainError",
    "ExportError",
    "FetchError",
    "RecordNotFoundError",
    "RecordValidationError",
    "ScheduleError",
    "Customer",
    "CustomerStatus",
    "Employee",
    "EmployeeStatus",
    "Expense",
    "ExpenseStatus",
    "Invoice",
    "InvoiceStatus",
    "Lead",
    "LeadStatus",
    "Opportunity",
    "OpportunityStage",
    "Priority",
    "ProcurementRequest",
    "ProcurementStatus",
    "Project",
    "ProjectStatus",
    "StoredFile",
    "Task",
    "TaskStatus",
]
