"""Configuration loading: YAML settings file, ``.env`` and environment overrides."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_ENV_PATH = ".env"

# env var -> (section, key)
ENV_OVERRIDES = {
    "DATABASE_URL": ("database", "url"),
    "COMPANY_NAME": ("reporting", "company_name"),
    "FRONTEND_BASE_URL": ("reporting", "frontend_base_url"),
    "CURRENCY_SYMBOL": ("reporting", "currency_symbol"),
    "LOG_LEVEL": ("app", "log_level"),
    "SMTP_HOST": ("delivery", "smtp_host"),
    "SMTP_PORT": ("delivery", "smtp_port"),
    "SMTP_USERNAME": ("delivery", "smtp_username"),
    "SMTP_PASSWORD": ("delivery", "smtp_password"),
    "SMTP_SENDER": ("delivery", "sender"),
}


@dataclass(frozen=True)
class ReportConfig:
    """Options shared by the report assembler and the export renderer."""

    company_name: str = "Company"
    frontend_base_url: str = "http://localhost:8501"
    currency_symbol: str = "$"
    date_format: str = "%m/%d/%Y"
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "ReportConfig":
        section = settings.get("reporting", {}) or {}
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{k: str(v) for k, v in section.items() if k in known and v is not None})


@dataclass(frozen=True)
class DeliveryConfig:
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    sender: str = "reports@localhost"
    use_tls: bool = False

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "DeliveryConfig":
        section = dict(settings.get("delivery", {}) or {})
        if "smtp_port" in section:
            section["smtp_port"] = int(section["smtp_port"])
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in section.items() if k in known})


def load_settings(
    config_path: str = DEFAULT_CONFIG_PATH,
    env_path: str = DEFAULT_ENV_PATH,
) -> dict[str, Any]:
    """Load the YAML settings, then apply environment overrides.

    A missing settings file is not an error; defaults apply.
    """
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)
        logger.info("Loaded environment from %s", env_path)

    settings: dict[str, Any] = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as fh:
            settings = yaml.safe_load(fh) or {}
        logger.info("Configuration loaded from %s", config_path)
    else:
        logger.warning("Config file not found: %s - using defaults.", config_path)

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            settings.setdefault(section, {})
            if settings[section] is None:
                settings[section] = {}
            settings[section][key] = value
    return settings
