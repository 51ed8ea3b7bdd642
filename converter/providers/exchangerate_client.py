from __future__ import annotations

from typing import Any, Dict, Optional

from converter.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError


UNSUPPORTED_CODE_ERRORS = {"unsupported-code", "malformed-request"}


class ExchangeRateApiError(RuntimeError):
    """Raised when ExchangeRate-API cannot be reached or reports an error."""

    def __init__(self, message: str, *, error_type: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code

    @property
    def unsupported_code(self) -> bool:
        if self.error_type in UNSUPPORTED_CODE_ERRORS:
            return True
        return self.status_code in (400, 404)


class ExchangeRateApiClientConfig:
    """Configuration parameters for the API client."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        api_key: str = "",
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.api_key = api_key
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds


class ExchangeRateApiClient:
    """HTTP client for ExchangeRate-API (keyless v4 and keyed v6 endpoints)."""

    def __init__(self, config: ExchangeRateApiClientConfig, client: Optional[HTTPClient] = None) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
            )
        )

    def latest(self, base: str) -> Dict[str, Any]:
        path = f"/latest/{base}"
        if self._config.api_key:
            path = f"/{self._config.api_key}{path}"

        try:
            payload = self._client.get(path)
        except HTTPClientError as exc:
            error_type = None
            if exc.payload:
                error_type = exc.payload.get("error-type")
            raise ExchangeRateApiError(
                f"ExchangeRate-API request failed: {exc}",
                error_type=error_type,
                status_code=exc.status_code,
            ) from exc

        if payload.get("result", "success") != "success":
            error_type = payload.get("error-type")
            raise ExchangeRateApiError(
                f"ExchangeRate-API error payload: {error_type or 'unknown'}",
                error_type=error_type,
            )

        return payload
