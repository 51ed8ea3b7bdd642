from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from converter.errors import PersistenceFailure
from converter.services.fx_conversion import ConversionRecord
from converter.services.ledger import FavoritePair, Ledger
from converter.services.ledger_store import SqlLedgerStore

START = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


def make_record(index: int) -> ConversionRecord:
    return ConversionRecord(
        from_currency="EUR",
        to_currency="GBP",
        amount=Decimal(index),
        result=Decimal(index) * Decimal("0.86"),
        timestamp=START + timedelta(minutes=index),
    )


@pytest.fixture
def store(app) -> SqlLedgerStore:
    return SqlLedgerStore()


def test_history_round_trips_most_recent_first(store):
    records = [make_record(3), make_record(2), make_record(1)]

    store.save_history(records)
    loaded = store.load_history()

    assert [record.amount for record in loaded] == [3, 2, 1]
    assert loaded[0].result == Decimal("2.58")
    assert loaded[0].timestamp == START + timedelta(minutes=3)
    assert loaded[0].timestamp.tzinfo is UTC


def test_save_history_replaces_previous_rows(store):
    store.save_history([make_record(1), make_record(0)])
    store.save_history([make_record(5)])

    assert [record.amount for record in store.load_history()] == [5]


def test_favorites_keep_creation_order(store):
    pairs = [
        FavoritePair(id="b" * 32, from_currency="USD", to_currency="EUR"),
        FavoritePair(id="a" * 32, from_currency="EUR", to_currency="USD"),
    ]

    store.save_favorites(pairs)

    assert store.load_favorites() == pairs


def test_save_favorites_with_empty_list_clears_rows(store):
    store.save_favorites([FavoritePair(id="c" * 32, from_currency="EUR", to_currency="JPY")])
    store.save_favorites([])

    assert store.load_favorites() == []


def test_database_errors_become_persistence_failures(store):
    with patch(
        "converter.services.ledger_store.get_session"
    ) as get_session_mock:
        session = get_session_mock.return_value
        session.execute.side_effect = OperationalError("DELETE", {}, Exception("locked"))

        with pytest.raises(PersistenceFailure, match="Unable to save favorites"):
            store.save_favorites([])

        session.rollback.assert_called_once()


def test_ledger_survives_reload_through_sql_store(store):
    ledger = Ledger(store, history_limit=5)
    ledger.append(make_record(1))
    pair = ledger.add_favorite("EUR", "USD")

    reloaded = Ledger(SqlLedgerStore(), history_limit=5)

    assert [record.amount for record in reloaded.list()] == [1]
    assert reloaded.favorites() == [pair]


def test_history_keeps_full_precision_across_reload(store):
    result = Decimal("100") * (Decimal("0.79") / Decimal("0.92"))
    record = ConversionRecord(
        from_currency="EUR",
        to_currency="GBP",
        amount=Decimal("123456789012345678901234.5"),
        result=result,
        timestamp=START,
    )

    store.save_history([record])
    loaded = store.load_history()

    assert loaded == [record]
    assert loaded[0].result == Decimal("85.86956521739130434782608696")
    assert str(loaded[0].amount) == "123456789012345678901234.5"
