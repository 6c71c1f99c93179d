"""Tests for report scheduling and SMTP delivery."""

from unittest.mock import MagicMock, patch

import pytest

from bizadmin.config import DeliveryConfig
from bizadmin.domain.errors import ScheduleError
from bizadmin.modules.reporting.delivery import SMTPDelivery
from bizadmin.modules.reporting.export_renderer import ExportArtifact
from bizadmin.scheduler import CADENCE_TRIGGERS, ReportScheduler, validate_schedule_request

CALLS = []


def record_call(schedule_id):
    CALLS.append(schedule_id)


@pytest.fixture()
def scheduler(test_db):
    sched = ReportScheduler(job_store_url=None, job_func=record_call)
    yield sched
    sched.stop(wait=False)


@pytest.fixture()
def artifact():
    return ExportArtifact(filename="summary_2024-06-15.pdf", content=b"%PDF-1.4 test", media_type="application/pdf")


# ===========================================================================
# Validation
# ===========================================================================
class TestValidateScheduleRequest:

    def test_normalises(self):
        cadence, recipients, fmt = validate_schedule_request(
            " Weekly ", ["cfo@example.com", "cfo@example.com", " ceo@example.com "], "PDF",
        )
        assert cadence == "weekly"
        assert recipients == ["cfo@example.com", "ceo@example.com"]
        assert fmt == "pdf"

    def test_single_string_recipient(self):
        _, recipients, _ = validate_schedule_request("daily", "ops@example.com", "xlsx")
        assert recipients == ["ops@example.com"]

    def test_blank_entries_ignored(self):
        _, recipients, _ = validate_schedule_request("daily", ["a@example.com", " ", ""], "pdf")
        assert recipients == ["a@example.com"]

    @pytest.mark.parametrize("cadence, recipients, fmt", [
        ("hourly", ["a@example.com"], "pdf"),
        ("daily", ["a@example.com"], "csv"),
        ("daily", ["not-an-address"], "pdf"),
        ("daily", [], "pdf"),
        ("daily", None, "pdf"),
    ])
    def test_rejects(self, cadence, recipients, fmt):
        with pytest.raises(ScheduleError):
            validate_schedule_request(cadence, recipients, fmt)

    def test_cadences(self):
        assert set(CADENCE_TRIGGERS) == {"daily", "weekly", "monthly"}
        assert CADENCE_TRIGGERS["weekly"]["day_of_week"] == "mon"
        assert CADENCE_TRIGGERS["monthly"]["day"] == 1


# ===========================================================================
# ReportScheduler
# ===========================================================================
class TestReportScheduler:

    def test_schedule_persists_and_registers(self, scheduler):
        info = scheduler.schedule_report("weekly", ["cfo@example.com"], "pdf")

        assert info["id"] is not None
        assert info["cadence"] == "weekly"
        assert info["recipients"] == ["cfo@example.com"]
        assert info["format"] == "pdf"
        assert info["active"] is True
        assert info["job_id"].startswith("report-weekly-")

        job = scheduler.get_job(info["job_id"])
        assert job is not None
        assert "#" + str(info["id"]) in job["name"]

    def test_invalid_request_persists_nothing(self, scheduler):
        with pytest.raises(ScheduleError):
            scheduler.schedule_report("yearly", ["cfo@example.com"], "pdf")
        assert scheduler.list_schedules() == []
        assert scheduler.list_jobs() == []

    def test_list_schedules(self, scheduler):
        scheduler.schedule_report("daily", ["a@example.com"], "pdf")
        scheduler.schedule_report("monthly", ["b@example.com"], "xlsx")
        schedules = scheduler.list_schedules()
        assert [s["cadence"] for s in schedules] == ["daily", "monthly"]
        assert schedules[1]["format"] == "xlsx"

    def test_cancel(self, scheduler):
        info = scheduler.schedule_report("daily", ["a@example.com"], "pdf")
        scheduler.cancel_schedule(info["id"])

        assert scheduler.get_schedule(info["id"])["active"] is False
        assert scheduler.get_job(info["job_id"]) is None
        assert scheduler.list_schedules(active_only=True) == []

    def test_cancel_unknown(self, scheduler):
        with pytest.raises(ScheduleError):
            scheduler.cancel_schedule(404)

    def test_next_run_time_once_started(self, scheduler):
        scheduler.start()
        assert scheduler.is_running
        info = scheduler.schedule_report("daily", ["a@example.com"], "pdf")
        assert info["next_run_time"] is not None
        assert "T07:00:00" in info["next_run_time"]

    def test_restore_schedules(self, test_db):
        first = ReportScheduler(job_store_url=None, job_func=record_call)
        first.schedule_report("daily", ["a@example.com"], "pdf")
        cancelled = first.schedule_report("weekly", ["b@example.com"], "pdf")
        first.cancel_schedule(cancelled["id"])

        second = ReportScheduler(job_store_url=None, job_func=record_call)
        assert second.list_jobs() == []
        assert second.restore_schedules() == 1
        assert len(second.list_jobs()) == 1

    def test_remove_unknown_job(self, scheduler):
        assert scheduler.remove_job("missing") is False


# ===========================================================================
# Delivery
# ===========================================================================
class TestSMTPDelivery:

    def test_build_message(self, artifact):
        delivery = SMTPDelivery(DeliveryConfig(sender="reports@example.com"))
        msg = delivery.build_message(["a@example.com", "b@example.com"], artifact, subject="Weekly")

        assert msg["From"] == "reports@example.com"
        assert msg["To"] == "a@example.com, b@example.com"
        assert msg["Subject"] == "Weekly"
        attachments = list(msg.iter_attachments())
        assert len(attachments) == 1
        assert attachments[0].get_filename() == "summary_2024-06-15.pdf"
        assert attachments[0].get_content_type() == "application/pdf"
        assert attachments[0].get_content() == b"%PDF-1.4 test"

    def test_send_uses_smtp(self, artifact):
        config = DeliveryConfig(
            smtp_host="mail.example.com", smtp_port=587,
            smtp_username="user", smtp_password="secret", use_tls=True,
        )
        with patch("bizadmin.modules.reporting.delivery.smtplib.SMTP") as smtp_cls:
            server = MagicMock()
            smtp_cls.return_value.__enter__.return_value = server
            SMTPDelivery(config, timeout=5).send(["a@example.com"], artifact)

        smtp_cls.assert_called_once_with("mail.example.com", 587, timeout=5)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("user", "secret")
        server.send_message.assert_called_once()

    def test_send_errors_propagate(self, artifact):
        with patch("bizadmin.modules.reporting.delivery.smtplib.SMTP", side_effect=OSError("refused")):
            with pytest.raises(OSError):
                SMTPDelivery().send(["a@example.com"], artifact)
