"""Summary statistic value objects, one per reporting domain.

Every class has a ``zero()`` constructor that returns the documented
zero-valued default, used both for empty input and for a domain whose
fetch failed.  ``to_dict()`` gives a JSON-friendly view with money as
floats rounded to cents.
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any

ZERO = Decimal("0")


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return round(float(value), 2)
    if isinstance(value, float):
        return round(value, 2)
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return value


class _Stats:
    @classmethod
    def zero(cls):
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class FinanceStats(_Stats):
    total_revenue: Decimal = ZERO
    paid_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_profit: Decimal = ZERO
    approved_expenses: Decimal = ZERO
    pending_expenses: Decimal = ZERO
    invoice_count: int = 0
    expense_count: int = 0
    expenses_by_category: dict[str, Decimal] = field(default_factory=dict)
    invoices_by_status: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class EmployeeStats(_Stats):
    total: int = 0
    active: int = 0
    departments: dict[str, int] = field(default_factory=dict)
    total_salary: Decimal = ZERO
    average_salary: Decimal = ZERO


@dataclass(frozen=True)
class ProjectStats(_Stats):
    total_projects: int = 0
    projects_by_status: dict[str, int] = field(default_factory=dict)
    total_tasks: int = 0
    tasks_by_status: dict[str, int] = field(default_factory=dict)
    overdue_tasks: int = 0
    average_completion: float = 0.0
    total_budget: Decimal = ZERO


@dataclass(frozen=True)
class ProcurementStats(_Stats):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_budget: Decimal = ZERO
    pending_budget: Decimal = ZERO
    average_value: Decimal = ZERO
    by_category: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class FileStats(_Stats):
    total: int = 0
    total_size: int = 0
    types: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SalesStats(_Stats):
    total_leads: int = 0
    leads_by_status: dict[str, int] = field(default_factory=dict)
    total_customers: int = 0
    active_customers: int = 0
    open_pipeline_value: Decimal = ZERO
    won_value: Decimal = ZERO
    weighted_pipeline: Decimal = ZERO
    conversion_rate: float = 0.0
