from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from flask import Flask

from converter.errors import PersistenceFailure
from converter.providers.base import InvalidBaseCurrency
from converter.providers.static import StaticRateProvider
from converter.services.context import (
    ConverterContext,
    build_ledger_store,
    get_context,
    init_context,
)
from converter.services.fx_conversion import (
    EMPTY_TABLE,
    ConversionParams,
    ConversionRecord,
    RateUnavailable,
)
from converter.services.ledger import Ledger
from converter.services.ledger_store import InMemoryLedgerStore, SqlLedgerStore
from converter.services.refresher import RateRefresher

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


class BrokenStore(InMemoryLedgerStore):
    def save_history(self, records):
        raise PersistenceFailure("store offline")


@pytest.fixture
def context() -> ConverterContext:
    return ConverterContext(
        rates=RateRefresher(primary=StaticRateProvider()),
        ledger=Ledger(InMemoryLedgerStore()),
    )


def test_defaults_match_initial_state(context):
    assert context.base_currency == "EUR"
    assert context.params == ConversionParams("EUR", "USD", Decimal("1"))
    assert context.current_table() is None
    assert context.available_currencies() == []


def test_refresh_switches_base_currency(context):
    table = context.refresh_rates("gbp")

    assert table.base_currency == "GBP"
    assert context.base_currency == "GBP"
    assert context.current_table() is table
    assert "GBP" in context.available_currencies()


def test_failed_refresh_keeps_base_and_table(context):
    context.refresh_rates()

    with pytest.raises(InvalidBaseCurrency):
        context.refresh_rates("XYZ")

    assert context.base_currency == "EUR"
    assert context.current_table().base_currency == "EUR"


def test_ensure_table_refreshes_only_when_nothing_held(context):
    first = context.ensure_table()
    assert context.ensure_table() is first


def test_convert_without_table_reports_empty(context):
    outcome = context.convert(now=NOW)

    assert outcome == RateUnavailable("EUR", "USD", EMPTY_TABLE)
    assert context.ledger.list() == []


def test_convert_records_into_history(context):
    context.refresh_rates()
    context.update_params(amount=Decimal("100"))

    record = context.convert(now=NOW)

    assert record == ConversionRecord("EUR", "USD", Decimal("100"), Decimal("108"), NOW)
    assert context.ledger.list() == [record]


def test_convert_without_recording(context):
    context.refresh_rates()

    context.convert(ConversionParams("EUR", "GBP", Decimal("2")), record=False)

    assert context.ledger.list() == []


def test_convert_surfaces_persistence_failure_after_updating_history():
    context = ConverterContext(
        rates=RateRefresher(primary=StaticRateProvider()),
        ledger=Ledger(BrokenStore()),
    )
    context.refresh_rates()

    with pytest.raises(PersistenceFailure):
        context.convert(now=NOW)

    assert len(context.ledger.list()) == 1


def test_update_params_merges_changes(context):
    context.update_params(from_currency="gbp")
    params = context.update_params(amount=Decimal("3"))

    assert params == ConversionParams("GBP", "USD", Decimal("3"))
    assert context.params is params


def test_rate_uses_held_table(context):
    context.refresh_rates()
    assert context.rate("EUR", "USD") == Decimal("1.08")
    assert context.rate("USD", "USD") == Decimal("1")


def test_build_ledger_store_follows_config():
    app = Flask(__name__)
    app.config["LEDGER_BACKEND"] = "memory"
    assert isinstance(build_ledger_store(app), InMemoryLedgerStore)

    app.config["LEDGER_BACKEND"] = "database"
    assert isinstance(build_ledger_store(app), SqlLedgerStore)


def test_init_context_wires_configuration():
    app = Flask(__name__)
    app.config.update(
        FX_RATE_PROVIDER="static",
        LEDGER_BACKEND="memory",
        HISTORY_LIMIT=10,
        DEFAULT_BASE_CURRENCY="usd",
    )

    context = init_context(app)

    assert context.base_currency == "USD"
    assert context.ledger.history_limit == 10
    with app.app_context():
        assert get_context() is context


def test_get_context_requires_initialization():
    app = Flask(__name__)
    with app.app_context():
        with pytest.raises(RuntimeError):
            get_context()
