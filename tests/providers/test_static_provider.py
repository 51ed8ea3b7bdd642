"""Static fixture provider tests."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from converter.providers.base import InvalidBaseCurrency
from converter.providers.static import FIXTURE_RATES, StaticRateProvider

pytestmark = pytest.mark.providers

FROZEN_NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def test_fetch_returns_fixture_table_for_eur():
    provider = StaticRateProvider(clock=lambda: FROZEN_NOW)

    table = provider.fetch("eur")

    assert table.base_currency == "EUR"
    assert table.source == "static"
    assert table.fetched_at == FROZEN_NOW
    assert table.rates["USD"] == Decimal("1.08")
    assert table.currencies == sorted(FIXTURE_RATES)


def test_fetch_rebases_for_other_known_base():
    table = StaticRateProvider().fetch("USD")

    assert table.base_currency == "USD"
    assert table.rates["USD"] == Decimal("1")
    assert table.rates["EUR"] == Decimal("1") / Decimal("1.08")


def test_fetch_unknown_base_raises():
    with pytest.raises(InvalidBaseCurrency) as exc_info:
        StaticRateProvider().fetch("XYZ")
    assert exc_info.value.base == "XYZ"


def test_custom_rates_are_served():
    provider = StaticRateProvider(rates={"USD": Decimal("1"), "EUR": Decimal("0.5")})
    assert provider.fetch("EUR").rates == {"USD": Decimal("2"), "EUR": Decimal("1")}
