"""Ledger persistence backends."""

from __future__ import annotations

from typing import Any, List, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from converter.database import get_session
from converter.errors import PersistenceFailure
from converter.models import ConversionHistoryEntry, FavoritePairEntry
from converter.services.fx_conversion import ConversionRecord
from converter.services.ledger import FavoritePair


class InMemoryLedgerStore:
    """Process-local store, the server-side analogue of browser local storage."""

    def __init__(self) -> None:
        self._history: List[ConversionRecord] = []
        self._favorites: List[FavoritePair] = []

    def load_history(self) -> List[ConversionRecord]:
        return list(self._history)

    def save_history(self, records: Sequence[ConversionRecord]) -> None:
        self._history = list(records)

    def load_favorites(self) -> List[FavoritePair]:
        return list(self._favorites)

    def save_favorites(self, pairs: Sequence[FavoritePair]) -> None:
        self._favorites = list(pairs)


class SqlLedgerStore:
    """Stores the ledger in the ``conversion_history`` and ``favorite_pairs`` tables.

    Each save replaces the collection's rows in one transaction.
    """

    def load_history(self) -> List[ConversionRecord]:
        rows = self._fetch(
            select(ConversionHistoryEntry).order_by(ConversionHistoryEntry.id.desc()),
            what="conversion history",
        )
        return [
            ConversionRecord(
                from_currency=row.from_currency,
                to_currency=row.to_currency,
                amount=row.amount,
                result=row.result,
                timestamp=row.timestamp,
            )
            for row in rows
        ]

    def save_history(self, records: Sequence[ConversionRecord]) -> None:
        # Oldest first so that ascending ids stay chronological.
        rows = [
            {
                "from_currency": record.from_currency,
                "to_currency": record.to_currency,
                "amount": record.amount,
                "result": record.result,
                "timestamp": record.timestamp,
            }
            for record in reversed(records)
        ]
        self._replace(ConversionHistoryEntry, rows, what="conversion history")

    def load_favorites(self) -> List[FavoritePair]:
        rows = self._fetch(
            select(FavoritePairEntry).order_by(FavoritePairEntry.position),
            what="favorites",
        )
        return [
            FavoritePair(id=row.id, from_currency=row.from_currency, to_currency=row.to_currency)
            for row in rows
        ]

    def save_favorites(self, pairs: Sequence[FavoritePair]) -> None:
        rows = [
            {
                "id": pair.id,
                "position": position,
                "from_currency": pair.from_currency,
                "to_currency": pair.to_currency,
            }
            for position, pair in enumerate(pairs)
        ]
        self._replace(FavoritePairEntry, rows, what="favorites")

    @staticmethod
    def _fetch(statement, *, what: str) -> Sequence[Any]:
        session = get_session()
        try:
            return session.scalars(statement.execution_options(populate_existing=True)).all()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceFailure(f"Unable to load {what}: {exc}") from exc

    @staticmethod
    def _replace(model, rows: List[dict[str, Any]], *, what: str) -> None:
        session = get_session()
        try:
            session.execute(delete(model).execution_options(synchronize_session=False))
            if rows:
                session.execute(insert(model), rows)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceFailure(f"Unable to save {what}: {exc}") from exc
