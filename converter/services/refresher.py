"""Holds the current rate table and refreshes it from primary/fallback providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter

from converter.logging import provider_log_extra
from converter.providers import (
    BaseRateProvider,
    InvalidBaseCurrency,
    ProviderError,
    RateTable,
    UpstreamUnavailable,
)
from converter.providers.registry import get_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableRecord:
    table: RateTable
    stale: bool


class RateRefresher:
    """Replaces the held table wholesale on every successful refresh.

    When no provider can deliver, the previous table stays available (marked
    stale) and the failure is raised to the caller.
    """

    def __init__(
        self,
        primary: BaseRateProvider,
        fallback: BaseRateProvider | None = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._record: TableRecord | None = None

    def refresh(self, base: str) -> RateTable:
        try:
            table = self._attempt(self._primary, base)
        except InvalidBaseCurrency:
            raise
        except ProviderError as primary_err:
            if self._fallback is None:
                self._mark_stale(base)
                raise
            try:
                table = self._attempt(self._fallback, base)
            except ProviderError as fallback_err:
                self._mark_stale(base)
                raise UpstreamUnavailable(
                    f"Unable to refresh {base} rates from any provider: "
                    f"primary: {primary_err}; fallback: {fallback_err}"
                ) from primary_err

        self._record = TableRecord(table=table, stale=False)
        return table

    def current(self) -> RateTable | None:
        record = self._record
        return record.table if record is not None else None

    def get_snapshot_info(self) -> TableRecord | None:
        return self._record

    def _attempt(self, provider: BaseRateProvider, base: str) -> RateTable:
        name = self._provider_name(provider)
        start = perf_counter()
        try:
            table = provider.fetch(base)
        except ProviderError as exc:
            logger.warning(
                "Provider %s failed: %s",
                name,
                exc,
                extra=provider_log_extra(
                    provider=name,
                    base=base,
                    event="provider.fetch",
                    status="error",
                    duration_ms=(perf_counter() - start) * 1000,
                    stale=False,
                    error=str(exc),
                ),
            )
            raise

        logger.info(
            "Provider fetch succeeded",
            extra=provider_log_extra(
                provider=name,
                base=base,
                event="provider.fetch",
                status="success",
                duration_ms=(perf_counter() - start) * 1000,
                stale=False,
            ),
        )
        return table

    def _mark_stale(self, base: str) -> None:
        record = self._record
        if record is None:
            return
        logger.warning(
            "Keeping stale %s table from %s fetched at %s",
            record.table.base_currency,
            record.table.source,
            record.table.fetched_at,
            extra=provider_log_extra(
                provider=record.table.source,
                base=base,
                event="provider.stale",
                status="stale",
                duration_ms=None,
                stale=True,
            ),
        )
        self._record = TableRecord(table=record.table, stale=True)

    @staticmethod
    def _provider_name(provider: BaseRateProvider) -> str:
        return getattr(provider, "name", provider.__class__.__name__)


def init_refresher(app) -> RateRefresher:
    """Build the refresher from the app's configured primary and fallback providers."""

    primary = app.extensions.get("rate_provider")
    if primary is None:
        primary = get_provider(app.config.get("FX_RATE_PROVIDER"), app.config)

    fallback = None
    fallback_name = app.config.get("FX_FALLBACK_PROVIDER")
    if fallback_name:
        try:
            fallback = get_provider(fallback_name, app.config)
        except ProviderError as exc:
            logger.warning("Configured fallback provider '%s' unavailable: %s", fallback_name, exc)

    refresher = RateRefresher(primary=primary, fallback=fallback)
    app.extensions["rate_refresher"] = refresher
    return refresher
