"""API Routes Package."""

from bizadmin.api.routes import health, records, reports

__all__ = ["health", "records", "reports"]
