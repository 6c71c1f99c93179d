"""Record stores: validated CRUD access handing out typed records."""

from bizadmin.stores.base import RecordStore
from bizadmin.stores.domain_stores import (
    CustomerStore,
    EmployeeStore,
    ExpenseStore,
    FileStore,
    InvoiceStore,
    LeadStore,
    OpportunityStore,
    ProcurementStore,
    ProjectStore,
    TaskStore,
)

STORES: dict[str, type[RecordStore]] = {
    "employees": EmployeeStore,
    "invoices": InvoiceStore,
    "expenses": ExpenseStore,
    "projects": ProjectStore,
    "tasks": TaskStore,
    "procurement": ProcurementStore,
    "leads": LeadStore,
    "customers": CustomerStore,
    "opportunities": OpportunityStore,
    "files": FileStore,
}

__all__ = [
    "RecordStore",
    "STORES",
    "CustomerStore",
    "EmployeeStore",
    "ExpenseStore",
    "FileStore",
    "InvoiceStore",
    "LeadStore",
    "OpportunityStore",
    "ProcurementStore",
    "ProjectStore",
    "TaskStore",
]
