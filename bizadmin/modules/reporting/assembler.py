"""Report assembler: concurrent per-domain fetch + aggregate into one payload.

Each domain is fetched and aggregated in a worker thread; all domains run
under a single ``asyncio.gather``.  A failing domain never fails the
report: its section falls back to the zero-valued statistic and the
failure is recorded in ``ReportPayload.failures``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional, Protocol, Sequence

from bizadmin.config import ReportConfig
from bizadmin.domain.errors import FetchError
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

logger = logging.getLogger(__name__)

SECTION_NAMES = ("employees", "finance", "procurement", "projects", "files", "sales")

ZERO_STATS: dict[str, Callable[[], Any]] = {
    "employees": EmployeeStats.zero,
    "finance": FinanceStats.zero,
    "procurement": ProcurementStats.zero,
    "projects": ProjectStats.zero,
    "files": FileStats.zero,
    "sales": SalesStats.zero,
}


class ReadStore(Protocol):
    def list(self) -> Sequence[Any]: ...


@dataclass
class ReportSources:
    """One read store per record type the report draws on."""

    employees: ReadStore
    invoices: ReadStore
    expenses: ReadStore
    projects: ReadStore
    tasks: ReadStore
    procurement: ReadStore
    files: ReadStore
    leads: ReadStore
    customers: ReadStore
    opportunities: ReadStore

    @classmethod
    def from_database(cls) -> "ReportSources":
        from bizadmin import stores

        return cls(
            employees=stores.EmployeeStore(),
            invoices=stores.InvoiceStore(),
            expenses=stores.ExpenseStore(),
            projects=stores.ProjectStore(),
            tasks=stores.TaskStore(),
            procurement=stores.ProcurementStore(),
            files=stores.FileStore(),
            leads=stores.LeadStore(),
            customers=stores.CustomerStore(),
            opportunities=stores.OpportunityStore(),
        )


@dataclass(frozen=True)
class DomainResult:
    """Outcome of one domain's fetch: its statistic, or the zero default plus the error."""

    domain: str
    stats: Any
    error: Optional[FetchError] = None
    records: dict[str, list] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReportRecords:
    """Raw record excerpts carried along for exports."""

    employees: list = field(default_factory=list)
    invoices: list = field(default_factory=list)
    expenses: list = field(default_factory=list)
    projects: list = field(default_factory=list)
    tasks: list = field(default_factory=list)
    procurement: list = field(default_factory=list)


@dataclass
class ReportPayload:
    generated_at: datetime
    company_name: str
    employees: EmployeeStats = field(default_factory=EmployeeStats.zero)
    finance: FinanceStats = field(default_factory=FinanceStats.zero)
    procurement: ProcurementStats = field(default_factory=ProcurementStats.zero)
    projects: ProjectStats = field(default_factory=ProjectStats.zero)
    files: FileStats = field(default_factory=FileStats.zero)
    sales: SalesStats = field(default_factory=SalesStats.zero)
    failures: dict[str, str] = field(default_factory=dict)
    records: Optional[ReportRecords] = None

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def section(self, name: str) -> Any:
        if name not in SECTION_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "generated_at": self.generated_at.isoformat(),
            "company_name": self.company_name,
        }
        for name in SECTION_NAMES:
            data[name] = getattr(self, name).to_dict()
        data["failures"] = dict(self.failures)
        return data


class ReportAssembler:
    """Builds a :class:`ReportPayload` from the record stores."""

    def __init__(self, sources: ReportSources, config: Optional[ReportConfig] = None) -> None:
        self.sources = sources
        self.config = config or ReportConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def assemble(
        self, include_records: bool = False, today: Optional[date] = None
    ) -> ReportPayload:
        """Fetch and aggregate every domain concurrently.

        Never raises because of a single domain: see ``payload.failures``.
        """
        logger.info("Assembling report (include_records=%s)", include_records)
        fetchers = self._fetchers(today)

        results: list[DomainResult] = await asyncio.gather(
            *(
                asyncio.to_thread(self._run_domain, name, fetchers[name])
                for name in SECTION_NAMES
            )
        )

        payload = ReportPayload(
            generated_at=datetime.now(),
            company_name=self.config.company_name,
        )
        excerpts = ReportRecords()
        for result in results:
            setattr(payload, result.domain, result.stats)
            if not result.ok:
                payload.failures[result.domain] = str(result.error)
            for key, records in result.records.items():
                setattr(excerpts, key, list(records))
        if include_records:
            payload.records = excerpts

        logger.info(
            "Report assembled: %d sections, %d failed",
            len(SECTION_NAMES), len(payload.failures),
        )
        return payload

    def assemble_sync(
        self, include_records: bool = False, today: Optional[date] = None
    ) -> ReportPayload:
        """Blocking wrapper around :meth:`assemble` for CLI and dashboard callers."""
        return asyncio.run(self.assemble(include_records=include_records, today=today))

    # ------------------------------------------------------------------
    # Domain fetchers
    # ------------------------------------------------------------------

    def _fetchers(self, today: Optional[date]) -> dict[str, Callable[[], tuple[Any, dict]]]:
        s = self.sources

        def employees():
            records = list(s.employees.list())
            return summarize_employees(records), {"employees": records}

        def finance():
            invoices = list(s.invoices.list())
            expenses = list(s.expenses.list())
            return (
                summarize_finance(invoices, expenses),
                {"invoices": invoices, "expenses": expenses},
            )

        def procurement():
            records = list(s.procurement.list())
            return summarize_procurement(records), {"procurement": records}

        def projects():
            project_records = list(s.projects.list())
            tasks = list(s.tasks.list())
            return (
                summarize_projects(project_records, tasks, today=today),
                {"projects": project_records, "tasks": tasks},
            )

        def files():
            return summarize_files(list(s.files.list())), {}

        def sales():
            return (
                summarize_sales(
                    list(s.leads.list()),
                    list(s.customers.list()),
                    list(s.opportunities.list()),
                ),
                {},
            )

        return {
            "employees": employees,
            "finance": finance,
            "procurement": procurement,
            "projects": projects,
            "files": files,
            "sales": sales,
        }

    @staticmethod
    def _run_domain(domain: str, fetch: Callable[[], tuple[Any, dict]]) -> DomainResult:
        try:
            stats, records = fetch()
        except Exception as exc:
            error = FetchError(domain, exc)
            logger.warning("Report section %s falls back to zero values: %s", domain, error)
            return DomainResult(domain=domain, stats=ZERO_STATS[domain](), error=error)
        return DomainResult(domain=domain, stats=stats, records=records)
