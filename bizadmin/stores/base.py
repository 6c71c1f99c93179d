"""Generic SQLAlchemy-backed record store."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from sqlalchemy.exc import IntegrityError

from bizadmin.database import get_session
from bizadmin.domain.errors import RecordNotFoundError, RecordValidationError
from bizadmin.stores.validation import Validator

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _to_column(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class RecordStore(Generic[R]):
    """CRUD access to one ORM model, handing out immutable typed records.

    Subclasses declare:

    * ``kind`` - human-readable name used in errors and logs.
    * ``model`` - the ORM class.
    * ``record_type`` - the frozen dataclass returned to callers.
    * ``schema`` - ``{field: validator}`` for every writable field.
    * ``required`` - fields that must be present on create.

    Rows read back from the database run through the same validators, so a
    record handed out by a store always satisfies its invariants.
    """

    kind: ClassVar[str] = "record"
    model: ClassVar[type]
    record_type: ClassVar[type]
    schema: ClassVar[dict[str, Validator]] = {}
    required: ClassVar[frozenset[str]] = frozenset()
    order_by: ClassVar[str] = "id"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[R]:
        """Return every record, oldest first.  Empty list when there is none."""
        with get_session() as session:
            rows = session.query(self.model).order_by(getattr(self.model, self.order_by)).all()
            records = [self._to_record(row) for row in rows]
        logger.debug("%s store: listed %d records", self.kind, len(records))
        return records

    def filter(self, **criteria: Any) -> list[R]:
        """Return records whose columns equal every given criterion."""
        conditions = []
        for field, value in criteria.items():
            if field != "id" and field not in self.schema:
                raise RecordValidationError(field, f"unknown filter for {self.kind}")
            if value is not None and field in self.schema:
                value = self.schema[field](field, value)
            conditions.append(getattr(self.model, field) == _to_column(value))

        with get_session() as session:
            rows = (
                session.query(self.model)
                .filter(*conditions)
                .order_by(getattr(self.model, self.order_by))
                .all()
            )
            return [self._to_record(row) for row in rows]

    def get(self, record_id: int) -> R:
        with get_session() as session:
            row = session.get(self.model, record_id)
            if row is None:
                raise RecordNotFoundError(self.kind, record_id)
            return self._to_record(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: Mapping[str, Any]) -> R:
        values = self.clean(payload, partial=False)
        try:
            with get_session() as session:
                row = self.model(**{k: _to_column(v) for k, v in values.items()})
                session.add(row)
                session.flush()
                record = self._to_record(row)
        except IntegrityError as exc:
            raise self._integrity_error(exc) from exc
        logger.info("Created %s id=%s", self.kind, record.id)
        return record

    def update(self, record_id: int, payload: Mapping[str, Any]) -> R:
        values = self.clean(payload, partial=True)
        try:
            with get_session() as session:
                row = session.get(self.model, record_id)
                if row is None:
                    raise RecordNotFoundError(self.kind, record_id)
                for field, value in values.items():
                    setattr(row, field, _to_column(value))
                session.flush()
                record = self._to_record(row)
        except IntegrityError as exc:
            raise self._integrity_error(exc) from exc
        logger.info("Updated %s id=%s fields=%s", self.kind, record_id, sorted(values))
        return record

    def delete(self, record_id: int) -> None:
        with get_session() as session:
            row = session.get(self.model, record_id)
            if row is None:
                raise RecordNotFoundError(self.kind, record_id)
            session.delete(row)
        logger.info("Deleted %s id=%s", self.kind, record_id)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self):
        """Run this domain's aggregation over the current records."""
        raise NotImplementedError(f"{type(self).__name__} has no stats")

    # ------------------------------------------------------------------
    # Validation / conversion
    # ------------------------------------------------------------------

    def clean(self, payload: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
        """Validate a create (``partial=False``) or update payload."""
        if not isinstance(payload, Mapping):
            raise RecordValidationError("payload", "must be an object")

        unknown = sorted(set(payload) - set(self.schema))
        if unknown:
            raise RecordValidationError(unknown[0], f"unknown field for {self.kind}")

        if not partial:
            missing = sorted(self.required - set(payload))
            if missing:
                raise RecordValidationError(missing[0], "is required")

        return {
            field: self.schema[field](field, value)
            for field, value in payload.items()
        }

    def _integrity_error(self, exc: IntegrityError) -> RecordValidationError:
        logger.warning("%s write rejected by database: %s", self.kind, exc.orig)
        message = str(exc.orig)
        field = "record"
        for name in self.schema:
            if f".{name}" in message:
                field = name
                break
        if "FOREIGN KEY" in message:
            return RecordValidationError(field, "references a record that does not exist")
        return RecordValidationError(field, f"conflicts with an existing {self.kind}")

    def _to_record(self, row: Any) -> R:
        values = {
            field: validate(field, getattr(row, field))
            for field, validate in self.schema.items()
        }
        return self.record_type(id=row.id, **values)
