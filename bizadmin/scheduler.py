"""Report scheduler built on APScheduler, with schedules persisted in the app database."""

import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from bizadmin.database import get_session
from bizadmin.domain.errors import ScheduleError
from bizadmin.models.report import ReportSchedule

logger = logging.getLogger(__name__)

# cadence -> CronTrigger fields; every run fires at 07:00 scheduler time
CADENCE_TRIGGERS: dict[str, dict[str, Any]] = {
    "daily": {"hour": 7, "minute": 0},
    "weekly": {"day_of_week": "mon", "hour": 7, "minute": 0},
    "monthly": {"day": 1, "hour": 7, "minute": 0},
}

SCHEDULE_FORMATS = ("pdf", "xlsx")


def validate_schedule_request(
    cadence: str, recipients: Sequence[str], fmt: str
) -> tuple[str, list[str], str]:
    """Normalise and validate a schedule request, raising :class:`ScheduleError`."""
    cadence = (cadence or "").strip().lower()
    if cadence not in CADENCE_TRIGGERS:
        raise ScheduleError(
            f"Unknown cadence {cadence!r}; expected one of {', '.join(CADENCE_TRIGGERS)}"
        )

    fmt = (fmt or "").strip().lower()
    if fmt not in SCHEDULE_FORMATS:
        raise ScheduleError(
            f"Unsupported format {fmt!r}; expected one of {', '.join(SCHEDULE_FORMATS)}"
        )

    if isinstance(recipients, str):
        recipients = [recipients]
    cleaned = []
    for address in recipients or []:
        address = str(address).strip()
        if not address:
            continue
        local, _, domain = address.partition("@")
        if not local or "." not in domain:
            raise ScheduleError(f"Invalid recipient address {address!r}")
        if address not in cleaned:
            cleaned.append(address)
    if not cleaned:
        raise ScheduleError("At least one recipient is required")
    return cadence, cleaned, fmt


def run_scheduled_report(schedule_id: int) -> None:
    """Job entry point: assemble, export and deliver one scheduled report."""
    from bizadmin.app import BizAdmin

    app = BizAdmin()
    app.initialize(with_scheduler=False)
    app.deliver_schedule(schedule_id)


def _schedule_to_dict(row: ReportSchedule, next_run: Optional[str] = None) -> dict[str, Any]:
    return {
        "id": row.id,
        "cadence": row.cadence,
        "recipients": list(row.recipients_json or []),
        "format": row.export_format,
        "job_id": row.job_id,
        "active": row.active,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "next_run_time": next_run,
    }


class ReportScheduler:
    """Wrapper around APScheduler for recurring report delivery.

    Usage::

        sched = ReportScheduler()
        info = sched.schedule_report("weekly", ["cfo@example.com"], "pdf")
        sched.start()
        sched.list_schedules()
        sched.stop()

    ``job_store_url=None`` keeps jobs in memory; schedules themselves are
    always persisted as ``ReportSchedule`` rows and re-registered by
    :meth:`restore_schedules`.
    """

    def __init__(
        self,
        job_store_url: Optional[str] = "sqlite:///data/scheduler_jobs.db",
        timezone: str = "UTC",
        max_workers: int = 3,
        job_func: Callable[[int], None] = run_scheduled_report,
    ):
        if job_store_url is None:
            jobstore = MemoryJobStore()
        else:
            if job_store_url.startswith("sqlite:///"):
                db_path = job_store_url.replace("sqlite:///", "")
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            jobstore = SQLAlchemyJobStore(url=job_store_url)

        self._scheduler = BackgroundScheduler(
            jobstores={"default": jobstore},
            executors={"default": ThreadPoolExecutor(max_workers=max_workers)},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 3600,
            },
            timezone=timezone,
        )
        self._timezone = timezone
        self._job_func = job_func
        self._running = False
        logger.info(
            "ReportScheduler initialized (store=%s, tz=%s, workers=%d)",
            job_store_url or "memory", timezone, max_workers,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            logger.warning("Scheduler is already running.")
            return
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started.")

    def stop(self, wait: bool = True) -> None:
        if not self._running:
            return
        self._scheduler.shutdown(wait=wait)
        self._running = False
        logger.info("Scheduler stopped.")

    # ------------------------------------------------------------------
    # Report schedules
    # ------------------------------------------------------------------

    def schedule_report(
        self, cadence: str, recipients: Sequence[str], fmt: str = "pdf"
    ) -> dict[str, Any]:
        """Persist a schedule and register its cron job.

        Raises:
            ScheduleError: on an unknown cadence or format, or bad recipients.
        """
        cadence, recipients, fmt = validate_schedule_request(cadence, recipients, fmt)
        job_id = f"report-{cadence}-{uuid.uuid4().hex[:12]}"

        with get_session() as session:
            row = ReportSchedule(
                cadence=cadence,
                recipients_json=recipients,
                export_format=fmt,
                job_id=job_id,
                active=True,
            )
            session.add(row)
            session.flush()
            schedule_id = row.id

        self._register(job_id, cadence, schedule_id)
        logger.info(
            "Report scheduled: id=%d cadence=%s format=%s recipients=%d",
            schedule_id, cadence, fmt, len(recipients),
        )
        return self.get_schedule(schedule_id)

    def list_schedules(self, active_only: bool = False) -> list[dict[str, Any]]:
        """Return persisted schedules, oldest first."""
        with get_session() as session:
            query = session.query(ReportSchedule)
            if active_only:
                query = query.filter(ReportSchedule.active.is_(True))
            rows = query.order_by(ReportSchedule.id.asc()).all()
            return [_schedule_to_dict(row, self._next_run(row.job_id)) for row in rows]

    def get_schedule(self, schedule_id: int) -> dict[str, Any]:
        with get_session() as session:
            row = session.get(ReportSchedule, schedule_id)
            if row is None:
                raise ScheduleError(f"Schedule {schedule_id} not found")
            return _schedule_to_dict(row, self._next_run(row.job_id))

    def cancel_schedule(self, schedule_id: int) -> None:
        """Deactivate a schedule and drop its job."""
        with get_session() as session:
            row = session.get(ReportSchedule, schedule_id)
            if row is None:
                raise ScheduleError(f"Schedule {schedule_id} not found")
            row.active = False
            job_id = row.job_id
        self.remove_job(job_id)
        logger.info("Schedule %d cancelled", schedule_id)

    def restore_schedules(self) -> int:
        """Re-register jobs for every active schedule (e.g. after a restart)."""
        count = 0
        with get_session() as session:
            rows = session.query(ReportSchedule).filter(ReportSchedule.active.is_(True)).all()
            pending = [(row.job_id, row.cadence, row.id) for row in rows]
        for job_id, cadence, schedule_id in pending:
            self._register(job_id, cadence, schedule_id)
            count += 1
        logger.info("Restored %d report schedule(s)", count)
        return count

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def _register(self, job_id: str, cadence: str, schedule_id: int) -> None:
        trigger = CronTrigger(timezone=self._timezone, **CADENCE_TRIGGERS[cadence])
        self._scheduler.add_job(
            self._job_func,
            trigger=trigger,
            id=job_id,
            name=f"{cadence} report #{schedule_id}",
            args=(schedule_id,),
            replace_existing=True,
        )
        logger.debug("Job added: %s [%s]", job_id, cadence)

    def remove_job(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
            logger.info("Job removed: %s", job_id)
            return True
        except JobLookupError:
            logger.warning("Job not found: %s", job_id)
            return False

    def list_jobs(self) -> list[dict[str, Any]]:
        return [self._job_info(job) for job in self._scheduler.get_jobs()]

    def get_job(self, job_id: str) -> Optional[dict[str, Any]]:
        job = self._scheduler.get_job(job_id)
        if job is None:
            return None
        return self._job_info(job)

    def _next_run(self, job_id: str) -> Optional[str]:
        job = self._scheduler.get_job(job_id)
        next_run = getattr(job, "next_run_time", None) if job is not None else None
        return next_run.isoformat() if next_run else None

    @staticmethod
    def _job_info(job) -> dict[str, Any]:
        # Jobs added before start() are pending and have no next_run_time yet.
        next_run = getattr(job, "next_run_time", None)
        return {
            "id": job.id,
            "name": job.name,
            "trigger": str(job.trigger),
            "next_run_time": next_run.isoformat() if next_run else None,
            "pending": job.pending,
        }
