"""Shared pytest fixtures for the business admin test suite."""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'bizadmin' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from bizadmin.domain.records import (  # noqa: E402
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

TODAY = date(2024, 6, 15)


class FakeStore:
    """In-memory read store returning a fixed list of records."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = 0

    def list(self):
        self.calls += 1
        return list(self.records)


class FailingStore:
    """Read store whose ``list()`` always raises."""

    def __init__(self, exc=None):
        self.exc = exc or ConnectionError("database unreachable")

    def list(self):
        raise self.exc


@pytest.fixture(autouse=True)
def _reset_db_engine():
    """Autouse fixture: reset the global DB engine before and after every test.

    This prevents cross-test pollution when tests create their own in-memory
    databases.
    """
    from bizadmin.database import reset_engine
    reset_engine()
    yield
    reset_engine()


@pytest.fixture()
def test_db():
    """Provide an in-memory SQLite database with all tables created.

    Yields a database URL string. The engine is automatically torn down
    after the test by the autouse ``_reset_db_engine`` fixture.
    """
    from bizadmin.database import reset_engine, init_db
    reset_engine()
    db_url = "sqlite:///:memory:"
    init_db(database_url=db_url, echo=False)
    yield db_url


@pytest.fixture()
def sample_records():
    """A small but complete dataset covering every reporting domain."""
    return {
        "employees": [
            Employee(id=1, first_name="Ada", last_name="Lovelace", email="ada@example.com",
                     department="Engineering", position="Lead", status=EmployeeStatus.ACTIVE,
                     salary=Decimal("1000"), hire_date=date(2020, 1, 6)),
            Employee(id=2, first_name="Alan", last_name="Turing", email="alan@example.com",
                     department="Engineering", status=EmployeeStatus.INACTIVE,
                     salary=Decimal("2000")),
        ],
        "invoices": [
            Invoice(id=1, invoice_number="INV-001", client_name="Globex",
                    amount=Decimal("1000"), status=InvoiceStatus.PAID, due_date=date(2024, 5, 1)),
            Invoice(id=2, invoice_number="INV-002", client_name="Initech",
                    amount=Decimal("500"), status=InvoiceStatus.DRAFT),
        ],
        "expenses": [
            Expense(id=1, description="Laptops", category="equipment",
                    amount=Decimal("300"), status=ExpenseStatus.APPROVED,
                    expense_date=date(2024, 5, 20)),
        ],
        "projects": [
            Project(id=1, name="Website", status=ProjectStatus.IN_PROGRESS, progress=40,
                    budget=Decimal("5000")),
            Project(id=2, name="Mobile App", status=ProjectStatus.PLANNING, progress=80,
                    budget=Decimal("12000")),
        ],
        "tasks": [
            Task(id=1, project_id=1, title="Design", status=TaskStatus.DONE,
                 due_date=date(2024, 6, 1)),
            Task(id=2, project_id=1, title="Build", status=TaskStatus.IN_PROGRESS,
                 due_date=date(2024, 6, 10)),
            Task(id=3, project_id=2, title="Plan", status=TaskStatus.TODO,
                 due_date=date(2024, 7, 1)),
        ],
        "procurement": [
            ProcurementRequest(id=1, title="Monitors", department="Engineering",
                               category="hardware", estimated_amount=Decimal("800"),
                               status=ProcurementStatus.PENDING_APPROVAL),
            ProcurementRequest(id=2, title="Licences", department="Finance",
                               category="software", estimated_amount=Decimal("200"),
                               status=ProcurementStatus.APPROVED),
        ],
        "files": [
            StoredFile(id=1, original_name="contract.pdf", mimetype="application/pdf", size=2048),
        ],
        "leads": [
            Lead(id=1, name="Wayne Enterprises", status=LeadStatus.CONVERTED),
            Lead(id=2, name="Stark Industries", status=LeadStatus.NEW),
        ],
        "customers": [
            Customer(id=1, name="Wayne Enterprises", status=CustomerStatus.ACTIVE),
        ],
        "opportunities": [
            Opportunity(id=1, name="Renewal", stage=OpportunityStage.PROPOSAL,
                        amount=Decimal("1000"), probability=50),
            Opportunity(id=2, name="Upsell", stage=OpportunityStage.CLOSED_WON,
                        amount=Decimal("400"), probability=100),
        ],
    }


@pytest.fixture()
def sources(sample_records):
    """ReportSources backed by in-memory fake stores."""
    from bizadmin.modules.reporting.assembler import ReportSources
    return ReportSources(**{name: FakeStore(records) for name, records in sample_records.items()})


@pytest.fixture()
def biz(tmp_path):
    """An initialised BizAdmin on a temporary SQLite file with an in-memory job store."""
    from bizadmin.app import BizAdmin

    settings = {
        "app": {"data_dir": str(tmp_path / "data"), "export_dir": str(tmp_path / "exports")},
        "database": {"url": "sqlite:///" + str(tmp_path / "bizadmin.db")},
        "reporting": {"company_name": "Acme Corp"},
        "scheduler": {"job_store": None, "timezone": "UTC"},
        "delivery": {"smtp_host": "mail.example.com", "sender": "reports@example.com"},
    }
    app = BizAdmin(settings=settings)
    app.initialize(with_scheduler=True)
    yield app
    if app.scheduler is not None and app.scheduler.is_running:
        app.scheduler.stop(wait=False)
