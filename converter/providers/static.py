"""Static fixture provider for demos, offline development and tests."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Mapping

from converter.services.fx_conversion import rebase_rates
from converter.utils.datetime import utc_now

from .base import BaseRateProvider, InvalidBaseCurrency
from .schemas import RateTable

FIXTURE_BASE = "EUR"

FIXTURE_RATES: Mapping[str, Decimal] = {
    "EUR": Decimal("1"),
    "USD": Decimal("1.08"),
    "GBP": Decimal("0.86"),
    "JPY": Decimal("161.12"),
    "CAD": Decimal("1.47"),
    "AUD": Decimal("1.64"),
    "CHF": Decimal("0.97"),
    "CNY": Decimal("7.86"),
    "MXN": Decimal("19.87"),
    "BRL": Decimal("5.45"),
    "ARS": Decimal("947.5"),
    "COP": Decimal("4234.15"),
    "CLP": Decimal("978.42"),
    "PEN": Decimal("4.07"),
}


class StaticRateProvider(BaseRateProvider):
    """Deterministic provider serving a hardcoded EUR-based table, rebased on request."""

    name = "static"

    def __init__(
        self,
        rates: Mapping[str, Decimal] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rates = dict(rates if rates is not None else FIXTURE_RATES)
        self._clock = clock

    def fetch(self, base: str) -> RateTable:
        base_currency = str(base or "").strip().upper()
        if base_currency not in self._rates:
            raise InvalidBaseCurrency(base_currency)

        return RateTable(
            base_currency=base_currency,
            fetched_at=self._clock(),
            source=self.name,
            rates=rebase_rates(self._rates, base_currency),
        )
