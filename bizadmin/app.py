"""Application orchestrator wiring configuration, database, reporting and scheduling."""

import logging
import os
import smtplib
from pathlib import Path
from typing import Any, Optional, Sequence

from bizadmin.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_ENV_PATH,
    DeliveryConfig,
    ReportConfig,
    load_settings,
)
from bizadmin.domain.errors import ExportError
from bizadmin.modules.reporting.assembler import ReportAssembler, ReportPayload, ReportSources
from bizadmin.modules.reporting.charts import ChartRegistry
from bizadmin.modules.reporting.delivery import SMTPDelivery
from bizadmin.modules.reporting.export_renderer import (
    REPORT_TYPE_BUILDERS,
    ExportArtifact,
    ExportRenderer,
)

logger = logging.getLogger(__name__)


class BizAdmin:
    """Central application class shared by the CLI, the API and the dashboard.

    Usage::

        app = BizAdmin()
        app.initialize()
        payload = app.summary()
        artifact = app.export("pdf")
    """

    def __init__(
        self,
        config_path: str = DEFAULT_CONFIG_PATH,
        env_path: str = DEFAULT_ENV_PATH,
        settings: Optional[dict[str, Any]] = None,
        sources: Optional[ReportSources] = None,
    ):
        self._config_path = config_path
        self._env_path = env_path
        self.settings: dict[str, Any] = settings or {}
        self._settings_given = settings is not None
        self._sources = sources
        self._initialized = False
        self.scheduler = None
        self.report_config = ReportConfig()
        self.delivery_config = DeliveryConfig()
        self.charts = ChartRegistry()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, with_scheduler: bool = True) -> None:
        """Load configuration, initialise the database and prepare the scheduler."""
        if self._initialized:
            return

        if not self._settings_given:
            self.settings = load_settings(self._config_path, self._env_path)

        app_cfg = self.settings.get("app", {}) or {}
        for dir_key in ("data_dir", "export_dir"):
            dir_path = app_cfg.get(dir_key, "")
            if dir_path:
                Path(dir_path).mkdir(parents=True, exist_ok=True)

        from bizadmin.database import init_db
        db_cfg = self.settings.get("database", {}) or {}
        init_db(database_url=db_cfg.get("url"), echo=bool(db_cfg.get("echo", False)))

        self.report_config = ReportConfig.from_settings(self.settings)
        self.delivery_config = DeliveryConfig.from_settings(self.settings)

        if with_scheduler:
            from bizadmin.scheduler import ReportScheduler
            sched_cfg = self.settings.get("scheduler", {}) or {}
            self.scheduler = ReportScheduler(
                job_store_url=sched_cfg.get("job_store", "sqlite:///data/scheduler_jobs.db"),
                timezone=sched_cfg.get("timezone", "UTC"),
                max_workers=int(sched_cfg.get("max_concurrent_jobs", 3)),
            )

        self._initialized = True
        logger.info("BizAdmin initialised (company=%s)", self.report_config.company_name)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Call initialize() before using the application.")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @property
    def sources(self) -> ReportSources:
        if self._sources is None:
            self._sources = ReportSources.from_database()
        return self._sources

    def assembler(self) -> ReportAssembler:
        self._ensure_initialized()
        return ReportAssembler(self.sources, self.report_config)

    def renderer(self) -> ExportRenderer:
        self._ensure_initialized()
        return ExportRenderer(self.report_config, charts=self.charts)

    def summary(self, include_records: bool = False) -> ReportPayload:
        return self.assembler().assemble_sync(include_records=include_records)

    def export(
        self,
        fmt: str,
        report_type: str = "summary",
        output_dir: Optional[str] = None,
    ) -> ExportArtifact:
        """Export a report and record it.  ``report_type`` is ``summary``,
        ``dashboard`` or the name of a record collection (``employees``,
        ``invoices``, ``expenses``, ``projects``, ``procurement``).
        """
        renderer = self.renderer()
        payload = None
        if report_type in ("summary", "dashboard"):
            payload = self.summary(include_records=report_type == "summary")
            artifact = renderer.export(payload, fmt, report_type=report_type)
        else:
            if report_type not in REPORT_TYPE_BUILDERS:
                raise ExportError(f"Unknown report type {report_type!r}")
            records = getattr(self.sources, report_type).list()
            artifact = renderer.export(list(records), fmt, report_type=report_type)

        file_path = None
        if output_dir:
            Path(output_dir).mkdir(parents=True, exist_ok=True)
            file_path = os.path.join(output_dir, artifact.filename)
            with open(file_path, "wb") as fh:
                fh.write(artifact.content)
            logger.info("Export written to %s", file_path)

        self._record_export(artifact, fmt, report_type, file_path, payload)
        return artifact

    def _record_export(self, artifact, fmt, report_type, file_path, payload) -> None:
        from bizadmin.database import get_session
        from bizadmin.models.report import Report

        with get_session() as session:
            session.add(Report(
                report_type=report_type,
                title=artifact.filename,
                export_format=fmt,
                filename=artifact.filename,
                size_bytes=artifact.size,
                file_path=file_path,
                failures_json=dict(payload.failures) if payload and payload.failures else None,
            ))

    def recent_exports(self, limit: int = 20) -> list[dict[str, Any]]:
        from bizadmin.database import get_session
        from bizadmin.models.report import Report

        with get_session() as session:
            rows = session.query(Report).order_by(Report.id.desc()).limit(limit).all()
            return [
                {
                    "id": row.id,
                    "report_type": row.report_type,
                    "format": row.export_format,
                    "filename": row.filename,
                    "size_bytes": row.size_bytes,
                    "created_at": row.created_at.isoformat() if row.created_at else None,
                }
                for row in rows
            ]

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule_report(self, cadence: str, recipients: Sequence[str], fmt: str = "pdf") -> dict:
        self._ensure_initialized()
        if self.scheduler is None:
            raise RuntimeError("Scheduler not available; initialize(with_scheduler=True).")
        return self.scheduler.schedule_report(cadence, recipients, fmt)

    def list_schedules(self) -> list[dict[str, Any]]:
        self._ensure_initialized()
        if self.scheduler is None:
            raise RuntimeError("Scheduler not available; initialize(with_scheduler=True).")
        return self.scheduler.list_schedules()

    def deliver_schedule(self, schedule_id: int, delivery: Optional[SMTPDelivery] = None) -> bool:
        """Run one schedule now: assemble, export and e-mail the artifact.

        Delivery failures are logged and reported through the return value.
        """
        from bizadmin.database import get_session
        from bizadmin.models.report import ReportSchedule

        self._ensure_initialized()
        with get_session() as session:
            row = session.get(ReportSchedule, schedule_id)
            if row is None or not row.active:
                logger.warning("Schedule %s missing or inactive, nothing to deliver", schedule_id)
                return False
            cadence = row.cadence
            recipients = list(row.recipients_json or [])
            fmt = row.export_format

        artifact = self.export(fmt, report_type="summary")
        delivery = delivery or SMTPDelivery(self.delivery_config)
        try:
            delivery.send(
                recipients,
                artifact,
                subject=f"{self.report_config.company_name} {cadence} report",
            )
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Delivery of schedule %s failed: %s", schedule_id, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, dict[str, Any]]:
        """Return health status of the major components."""
        self._ensure_initialized()
        status: dict[str, dict[str, Any]] = {}

        try:
            from sqlalchemy import text
            from bizadmin.database import get_session
            with get_session() as session:
                session.execute(text("SELECT 1"))
            status["database"] = {"status": "ok", "details": "reachable"}
        except Exception as exc:
            status["database"] = {"status": "error", "details": str(exc)}

        if self.scheduler is not None:
            jobs = self.scheduler.list_jobs()
            status["scheduler"] = {
                "status": "ok",
                "details": f"{'running' if self.scheduler.is_running else 'stopped'}, {len(jobs)} jobs",
            }
        else:
            status["scheduler"] = {"status": "warning", "details": "not configured"}

        status["config"] = {
            "status": "ok" if self.settings else "warning",
            "details": f"{len(self.settings)} sections loaded" if self.settings else "defaults",
        }
        return status
