"""Explicit converter state handed to the HTTP and CLI layers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from flask import Flask, current_app

from converter.providers import RateTable
from converter.services.fx_conversion import (
    ConversionParams,
    ConversionRecord,
    RateUnavailable,
    build_record,
    normalize_currency,
    pair_rate,
)
from converter.services.ledger import Ledger, LedgerStore
from converter.services.ledger_store import InMemoryLedgerStore, SqlLedgerStore
from converter.services.refresher import RateRefresher, init_refresher
from converter.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CONTEXT_EXT_KEY = "converter_context"


@dataclass
class ConverterContext:
    """Rates, ledger and the pending conversion parameters for one deployment."""

    rates: RateRefresher
    ledger: Ledger
    base_currency: str = "EUR"
    params: ConversionParams = field(default_factory=ConversionParams)

    def __post_init__(self) -> None:
        self.base_currency = normalize_currency(self.base_currency)

    def refresh_rates(self, base: Optional[str] = None) -> RateTable:
        """Fetch a new table; a successful fetch for another base switches ``base_currency``."""

        requested = normalize_currency(base) if base else self.base_currency
        table = self.rates.refresh(requested)
        self.base_currency = table.base_currency
        return table

    def current_table(self) -> Optional[RateTable]:
        return self.rates.current()

    def ensure_table(self) -> RateTable:
        table = self.rates.current()
        if table is None:
            logger.info("No rate table held yet; refreshing %s", self.base_currency)
            table = self.refresh_rates()
        return table

    def available_currencies(self) -> List[str]:
        table = self.rates.current()
        return table.currencies if table is not None else []

    def update_params(
        self,
        *,
        from_currency: Optional[str] = None,
        to_currency: Optional[str] = None,
        amount: Optional[Decimal] = None,
    ) -> ConversionParams:
        self.params = self.params.merged(
            from_currency=from_currency, to_currency=to_currency, amount=amount
        )
        return self.params

    def rate(self, from_currency: str, to_currency: str) -> Decimal | RateUnavailable:
        return pair_rate(self.rates.current(), from_currency, to_currency)

    def convert(
        self,
        params: Optional[ConversionParams] = None,
        *,
        record: bool = True,
        now: Optional[datetime] = None,
    ) -> ConversionRecord | RateUnavailable:
        """Convert against the held table, appending the result to the history when ``record``.

        A ``PersistenceFailure`` from the ledger propagates after the record
        has been added to the in-memory history.
        """

        outcome = build_record(
            self.rates.current(),
            params or self.params,
            timestamp=now or utc_now(),
        )
        if record and isinstance(outcome, ConversionRecord):
            self.ledger.append(outcome)
        return outcome


def build_ledger_store(app: Flask) -> LedgerStore:
    if app.config.get("LEDGER_BACKEND", "database") == "memory":
        return InMemoryLedgerStore()
    return SqlLedgerStore()


def init_context(app: Flask) -> ConverterContext:
    """Wire refresher and ledger from configuration and attach the context to the app."""

    refresher = app.extensions.get("rate_refresher") or init_refresher(app)
    history_limit = app.config.get("HISTORY_LIMIT", 100)
    ledger = Ledger(
        build_ledger_store(app),
        history_limit=int(history_limit) if history_limit else None,
    )
    context = ConverterContext(
        rates=refresher,
        ledger=ledger,
        base_currency=app.config.get("DEFAULT_BASE_CURRENCY", "EUR"),
    )
    app.extensions[CONTEXT_EXT_KEY] = context
    return context


def get_context() -> ConverterContext:
    """Return the context attached to the current Flask app."""

    context = current_app.extensions.get(CONTEXT_EXT_KEY)
    if context is None:
        raise RuntimeError("Converter context has not been initialized. Call init_context first.")
    return context
