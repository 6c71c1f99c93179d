"""Domain error types shared by stores, reporting, and the API."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses keep ValueError compatibility so callers that already
    catch ValueError keep working.
    """


class RecordValidationError(DomainError):
    """A create/update payload was rejected at the store boundary."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class RecordNotFoundError(DomainError):
    """Requested record does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class FetchError(DomainError):
    """Fetching or aggregating one reporting domain failed."""

    def __init__(self, domain: str, cause: Optional[BaseException] = None):
        self.domain = domain
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{domain} fetch failed ({detail})")


class ExportError(DomainError):
    """Unsupported export format or a document that could not be rendered."""


class ScheduleError(DomainError):
    """Invalid report schedule request."""
