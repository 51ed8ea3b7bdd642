"""ExchangeRate-API provider implementation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from converter.providers.base import BaseRateProvider, InvalidBaseCurrency, UpstreamUnavailable
from converter.providers.schemas import RateTable
from converter.utils.datetime import ensure_utc, from_unix, utc_now

from .exchangerate_client import (
    ExchangeRateApiClient,
    ExchangeRateApiClientConfig,
    ExchangeRateApiError,
)


class ExchangeRateApiProvider(BaseRateProvider):
    """Provider that fetches complete rate tables from ExchangeRate-API."""

    name = "exchangerate_api"
    config_prefix = "EXCHANGE_RATE_API_"

    def __init__(
        self,
        client: ExchangeRateApiClient,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._clock = clock

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ExchangeRateApiProvider:
        client_config = cls._build_client_config(config)
        return cls(ExchangeRateApiClient(client_config))

    def fetch(self, base: str) -> RateTable:
        base_currency = self._normalize_base(base)
        try:
            payload = self._client.latest(base_currency)
        except ExchangeRateApiError as exc:
            if exc.unsupported_code:
                raise InvalidBaseCurrency(base_currency) from exc
            raise UpstreamUnavailable(str(exc)) from exc

        rates = payload.get("conversion_rates", payload.get("rates"))
        if not isinstance(rates, Mapping):
            raise UpstreamUnavailable("Unexpected response payload from ExchangeRate-API: no rates")

        reported_base = str(payload.get("base_code") or payload.get("base") or base_currency).upper()
        if reported_base != base_currency:
            raise UpstreamUnavailable(
                f"ExchangeRate-API answered for base {reported_base}, expected {base_currency}"
            )

        try:
            return RateTable(
                base_currency=base_currency,
                fetched_at=self._clock(),
                source=self.name,
                rates=rates,
                published_at=self._published_at(payload),
            )
        except (TypeError, ValueError) as exc:
            raise UpstreamUnavailable(f"Malformed rate table from ExchangeRate-API: {exc}") from exc

    @staticmethod
    def _published_at(payload: Mapping[str, Any]) -> datetime | None:
        unix_value = payload.get("time_last_update_unix", payload.get("time_last_updated"))
        if isinstance(unix_value, int | float):
            return from_unix(unix_value)
        date_value = payload.get("date")
        if isinstance(date_value, str):
            try:
                return ensure_utc(datetime.fromisoformat(date_value))
            except ValueError:
                return None
        return None

    @staticmethod
    def _normalize_base(value: str) -> str:
        normalized = str(value or "").strip().upper()
        if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
            raise InvalidBaseCurrency(normalized, f"'{value}' is not a valid ISO 4217 currency code.")
        return normalized

    @classmethod
    def _build_client_config(cls, config: Mapping[str, Any]) -> ExchangeRateApiClientConfig:
        base_url_value = config.get("EXCHANGE_RATE_API_BASE_URL")
        if not isinstance(base_url_value, str) or not base_url_value.strip():
            base_url = "https://api.exchangerate-api.com/v4"
        else:
            base_url = base_url_value
        return ExchangeRateApiClientConfig(
            base_url=base_url,
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 5)),
            api_key=str(config.get("EXCHANGE_RATE_API_KEY") or ""),
            max_retries=int(config.get("EXCHANGE_RATE_API_MAX_RETRIES", 3)),
            backoff_seconds=float(config.get("EXCHANGE_RATE_API_BACKOFF_SECONDS", 0.5)),
        )
