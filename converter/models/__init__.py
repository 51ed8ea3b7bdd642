"""SQLAlchemy ORM models backing the conversion ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, String, TypeDecorator, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from converter.database import Base


class DecimalText(TypeDecorator):
    """Decimal stored as its exact string form so values reload unchanged."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else Decimal(value)


class ConversionHistoryEntry(Base):
    """One completed conversion; row id order is chronological."""

    __tablename__ = "conversion_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DecimalText(64), nullable=False)
    result: Mapped[Decimal] = mapped_column(DecimalText(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<ConversionHistoryEntry {self.from_currency}->{self.to_currency} "
            f"amount={self.amount} result={self.result}>"
        )


class FavoritePairEntry(Base):
    """A saved (from, to) currency pair."""

    __tablename__ = "favorite_pairs"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", name="uq_favorite_pairs_pair"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(3), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<FavoritePairEntry id={self.id} {self.from_currency}->{self.to_currency}>"
