"""Procurement request SQLAlchemy model."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bizadmin.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcurementRequestRow(Base):
    """Purchase request moving through draft -> approval -> ordered -> received."""

    __tablename__ = "procurement_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(100), default="", nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), default="other", nullable=False)
    estimated_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False, index=True)
    priority: Mapped[str] = mapped_column(String(50), default="medium", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __repr__(self) -> str:
        return f"<ProcurementRequestRow id={self.id} status={self.status} amount={self.estimated_amount}>"
