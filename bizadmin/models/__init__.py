"""SQLAlchemy ORM models - import every model so Base.metadata is populated."""

from bizadmin.models.employee import EmployeeRow
from bizadmin.models.finance import ExpenseRow, InvoiceRow
from bizadmin.models.procurement import ProcurementRequestRow
from bizadmin.models.project import ProjectRow, TaskRow
from bizadmin.models.sales import CustomerRow, LeadRow, OpportunityRow
from bizadmin.models.file import StoredFileRow
from bizadmin.models.report import Report, ReportSchedule

__all__ = [
    "EmployeeRow",
    "InvoiceRow",
    "ExpenseRow",
    "ProcurementRequestRow",
    "ProjectRow",
    "TaskRow",
    "LeadRow",
    "CustomerRow",
    "OpportunityRow",
    "StoredFileRow",
    "Report",
    "ReportSchedule",
]
