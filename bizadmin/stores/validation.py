"""Field validators used at the store boundary.

Each validator takes ``(field, value)`` and returns the cleaned value or
raises :class:`RecordValidationError`.  Validators accept both raw API
payload values (strings, floats) and values already in their final type,
so the same functions clean create/update payloads and ORM rows.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Optional

from bizadmin.domain.errors import RecordValidationError

Validator = Callable[[str, Any], Any]


def text(max_length: int = 255, required: bool = True) -> Validator:
    def _validate(field: str, value: Any) -> Optional[str]:
        if value is None:
            if required:
                raise RecordValidationError(field, "is required")
            return None
        if not isinstance(value, str):
            raise RecordValidationError(field, "must be a string")
        value = value.strip()
        if required and not value:
            raise RecordValidationError(field, "must not be empty")
        if len(value) > max_length:
            raise RecordValidationError(field, f"must be at most {max_length} characters")
        return value
    return _validate


def email() -> Validator:
    base = text(max_length=255)

    def _validate(field: str, value: Any) -> str:
        value = base(field, value)
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise RecordValidationError(field, f"invalid email address {value!r}")
        return value.lower()
    return _validate


def money(required: bool = True) -> Validator:
    """Non-negative amount, quantised to cents."""
    def _validate(field: str, value: Any) -> Optional[Decimal]:
        if value is None:
            if required:
                raise RecordValidationError(field, "is required")
            return None
        if isinstance(value, bool):
            raise RecordValidationError(field, "must be a number")
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise RecordValidationError(field, f"not a number: {value!r}")
        if not amount.is_finite():
            raise RecordValidationError(field, "must be finite")
        if amount < 0:
            raise RecordValidationError(field, "must be >= 0")
        return amount.quantize(Decimal("0.01"))
    return _validate


def integer(minimum: int = 0, maximum: Optional[int] = None) -> Validator:
    def _validate(field: str, value: Any) -> int:
        if value is None or isinstance(value, bool):
            raise RecordValidationError(field, "must be an integer")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise RecordValidationError(field, f"not an integer: {value!r}")
        if number != value and not isinstance(value, str):
            raise RecordValidationError(field, f"not an integer: {value!r}")
        if number < minimum:
            raise RecordValidationError(field, f"must be >= {minimum}")
        if maximum is not None and number > maximum:
            raise RecordValidationError(field, f"must be <= {maximum}")
        return number
    return _validate


def optional_integer() -> Validator:
    def _validate(field: str, value: Any) -> Optional[int]:
        if value is None:
            return None
        return integer(minimum=1)(field, value)
    return _validate


def choice(enum_cls: type[Enum]) -> Validator:
    allowed = ", ".join(member.value for member in enum_cls)

    def _validate(field: str, value: Any) -> Enum:
        try:
            return enum_cls(value)
        except ValueError:
            raise RecordValidationError(field, f"{value!r} is not one of: {allowed}")
    return _validate


def day(required: bool = False) -> Validator:
    """Calendar date from a ``date``, a ``datetime`` or an ISO ``YYYY-MM-DD`` string."""
    def _validate(field: str, value: Any) -> Optional[date]:
        if value is None or value == "":
            if required:
                raise RecordValidationError(field, "is required")
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                raise RecordValidationError(field, f"invalid date {value!r}, expected YYYY-MM-DD")
        raise RecordValidationError(field, f"invalid date {value!r}")
    return _validate


def timestamp() -> Validator:
    def _validate(field: str, value: Any) -> Optional[datetime]:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise RecordValidationError(field, f"invalid timestamp {value!r}")
        raise RecordValidationError(field, f"invalid timestamp {value!r}")
    return _validate
