"""Tests for the BizAdmin orchestrator, configuration loading and demo seed."""

import smtplib
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from bizadmin.app import BizAdmin
from bizadmin.config import ENV_OVERRIDES, DeliveryConfig, ReportConfig, load_settings
from bizadmin.domain.errors import ExportError
from bizadmin.seed import seed_demo_data


class RecordingDelivery:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def send(self, recipients, artifact, subject=None, body=None):
        if self.error is not None:
            raise self.error
        self.sent.append((list(recipients), artifact, subject))


# ===========================================================================
# Configuration
# ===========================================================================
class TestConfiguration:

    def test_load_settings_with_env_override(self, tmp_path, monkeypatch):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "reporting:\n  company_name: From YAML\n  currency_symbol: '€'\n"
            "delivery:\n  smtp_port: 25\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("COMPANY_NAME", "From Env")
        monkeypatch.setenv("SMTP_PORT", "2525")

        settings = load_settings(str(config_file), str(tmp_path / "missing.env"))
        report = ReportConfig.from_settings(settings)
        delivery = DeliveryConfig.from_settings(settings)

        assert report.company_name == "From Env"
        assert report.currency_symbol == "€"
        assert delivery.smtp_port == 2525

    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        for name in ENV_OVERRIDES:
            monkeypatch.delenv(name, raising=False)
        settings = load_settings(str(tmp_path / "nope.yaml"), str(tmp_path / "nope.env"))
        assert ReportConfig.from_settings(settings) == ReportConfig()

    def test_settings_file_parseable(self):
        settings = load_settings(
            str(Path(__file__).resolve().parent.parent / "config" / "settings.yaml"), "missing.env"
        )
        for section in ("app", "database", "reporting", "scheduler", "delivery"):
            assert section in settings


# ===========================================================================
# Lifecycle
# ===========================================================================
class TestLifecycle:

    def test_requires_initialize(self):
        with pytest.raises(RuntimeError):
            BizAdmin(settings={}).assembler()

    def test_initialize_creates_directories(self, biz, tmp_path):
        assert (tmp_path / "data").is_dir()
        assert (tmp_path / "exports").is_dir()
        assert biz.report_config.company_name == "Acme Corp"
        assert biz.delivery_config.smtp_host == "mail.example.com"

    def test_status(self, biz):
        status = biz.get_status()
        assert status["database"]["status"] == "ok"
        assert status["scheduler"]["status"] == "ok"
        assert status["config"]["status"] == "ok"


# ===========================================================================
# Reporting through the app
# ===========================================================================
class TestReporting:

    def test_seeded_summary(self, biz):
        counts = seed_demo_data(today=date(2024, 6, 15))
        assert counts["employees"] == 5

        payload = biz.summary()
        assert payload.failures == {}
        assert payload.finance.total_revenue == Decimal("20300")
        assert payload.finance.paid_revenue == Decimal("12000")
        assert payload.finance.total_expenses == Decimal("4400")
        assert payload.finance.net_profit == Decimal("7600")
        assert payload.employees.active == 3
        assert payload.projects.average_completion == 60
        assert payload.sales.conversion_rate == 50.0

    def test_export_writes_file_and_history(self, biz, tmp_path):
        out_dir = tmp_path / "out"
        artifact = biz.export("csv", report_type="summary", output_dir=str(out_dir))

        assert (out_dir / artifact.filename).read_bytes() == artifact.content
        history = biz.recent_exports()
        assert len(history) == 1
        assert history[0]["report_type"] == "summary"
        assert history[0]["format"] == "csv"
        assert history[0]["size_bytes"] == artifact.size

    def test_record_export(self, biz):
        seed_demo_data(today=date(2024, 6, 15))
        artifact = biz.export("xlsx", report_type="invoices")
        assert artifact.filename.startswith("invoices_")
        assert artifact.filename.endswith(".xlsx")

    def test_dashboard_snapshot(self, biz):
        artifact = biz.export("chart-snapshot", report_type="dashboard")
        assert artifact.content.startswith(b"%PDF")

    def test_unknown_report_type(self, biz):
        with pytest.raises(ExportError):
            biz.export("pdf", report_type="payroll")

    def test_unknown_format(self, biz):
        with pytest.raises(ExportError):
            biz.export("docx")


# ===========================================================================
# Scheduling and delivery
# ===========================================================================
class TestScheduling:

    def test_schedule_and_list(self, biz):
        info = biz.schedule_report("weekly", ["cfo@example.com"], "xlsx")
        schedules = biz.list_schedules()
        assert [s["id"] for s in schedules] == [info["id"]]

    def test_schedule_without_scheduler(self, tmp_path):
        app = BizAdmin(settings={"database": {"url": "sqlite:///" + str(tmp_path / "x.db")}})
        app.initialize(with_scheduler=False)
        with pytest.raises(RuntimeError):
            app.schedule_report("daily", ["a@example.com"])

    def test_deliver_schedule(self, biz):
        info = biz.schedule_report("daily", ["cfo@example.com", "ceo@example.com"], "pdf")
        delivery = RecordingDelivery()

        assert biz.deliver_schedule(info["id"], delivery=delivery) is True
        recipients, artifact, subject = delivery.sent[0]
        assert recipients == ["cfo@example.com", "ceo@example.com"]
        assert artifact.content.startswith(b"%PDF")
        assert subject == "Acme Corp daily report"
        assert biz.recent_exports()[0]["format"] == "pdf"

    def test_delivery_failure_is_reported(self, biz):
        info = biz.schedule_report("daily", ["cfo@example.com"], "xlsx")
        delivery = RecordingDelivery(error=smtplib.SMTPException("relay denied"))
        assert biz.deliver_schedule(info["id"], delivery=delivery) is False

    def test_cancelled_schedule_is_not_delivered(self, biz):
        info = biz.schedule_report("daily", ["cfo@example.com"], "pdf")
        biz.scheduler.cancel_schedule(info["id"])
        delivery = RecordingDelivery()
        assert biz.deliver_schedule(info["id"], delivery=delivery) is False
        assert delivery.sent == []

    def test_unknown_schedule(self, biz):
        assert biz.deliver_schedule(999, delivery=RecordingDelivery()) is False
