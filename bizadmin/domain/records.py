"""Typed, immutable records for every business domain.

Records are what the stores hand out and what the aggregation engine
consumes.  Status fields are enums so that every record carries one of
a closed set of states; validation happens when a store builds a
record, never inside the aggregation engine.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Status / priority enums
# ---------------------------------------------------------------------------

class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"
    ON_LEAVE = "on_leave"
    SUSPENDED = "suspended"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"
    CANCELLED = "cancelled"


TERMINAL_TASK_STATUSES = frozenset({TaskStatus.DONE, TaskStatus.CANCELLED})


class ProcurementStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    UNQUALIFIED = "unqualified"
    CONVERTED = "converted"
    LOST = "lost"


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"
    CHURNED = "churned"


class OpportunityStage(str, Enum):
    PROSPECTING = "prospecting"
    QUALIFICATION = "qualification"
    NEEDS_ANALYSIS = "needs_analysis"
    VALUE_PROPOSITION = "value_proposition"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


CLOSED_STAGES = frozenset({OpportunityStage.CLOSED_WON, OpportunityStage.CLOSED_LOST})


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Invoice:
    """Outgoing invoice.  ``amount`` is always >= 0."""

    id: Optional[int] = None
    invoice_number: str = ""
    client_name: str = ""
    amount: Decimal = ZERO
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issue_date: Optional[date] = None
    due_date: Optional[date] = None


@dataclass(frozen=True)
class Expense:
    """Company expense.  ``amount`` is always >= 0."""

    id: Optional[int] = None
    description: str = ""
    category: str = "other"
    amount: Decimal = ZERO
    status: ExpenseStatus = ExpenseStatus.PENDING
    expense_date: Optional[date] = None
    owner: Optional[str] = None


# ---------------------------------------------------------------------------
# HR
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Employee:
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    department: str = ""
    position: str = ""
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    salary: Optional[Decimal] = None
    hire_date: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Project:
    """Project with a 0-100 completion percentage."""

    id: Optional[int] = None
    name: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    progress: int = 0
    budget: Decimal = ZERO
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class Task:
    id: Optional[int] = None
    project_id: Optional[int] = None
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None

    def is_overdue(self, today: date) -> bool:
        """A task is overdue once its due date has passed and it is still open."""
        if self.due_date is None:
            return False
        return self.due_date < today and self.status not in TERMINAL_TASK_STATUSES


# ---------------------------------------------------------------------------
# Procurement
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProcurementRequest:
    id: Optional[int] = None
    title: str = ""
    department: str = ""
    category: str = "other"
    estimated_amount: Decimal = ZERO
    status: ProcurementStatus = ProcurementStatus.DRAFT
    priority: Priority = Priority.MEDIUM


# ---------------------------------------------------------------------------
# Sales CRM
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Lead:
    id: Optional[int] = None
    name: str = ""
    company: str = ""
    status: LeadStatus = LeadStatus.NEW
    estimated_value: Decimal = ZERO


@dataclass(frozen=True)
class Customer:
    id: Optional[int] = None
    name: str = ""
    email: str = ""
    status: CustomerStatus = CustomerStatus.PROSPECT


@dataclass(frozen=True)
class Opportunity:
    id: Optional[int] = None
    name: str = ""
    stage: OpportunityStage = OpportunityStage.PROSPECTING
    amount: Decimal = ZERO
    probability: int = 0


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StoredFile:
    """Metadata for an uploaded file; the bytes live elsewhere."""

    id: Optional[int] = None
    original_name: str = ""
    mimetype: str = "application/octet-stream"
    size: int = 0
    category: Optional[str] = None
    uploaded_at: Optional[datetime] = None
