"""Rate table providers and the data structures they return."""

from .base import BaseRateProvider, InvalidBaseCurrency, ProviderError, UpstreamUnavailable
from .exchangerate_client import (
    ExchangeRateApiClient,
    ExchangeRateApiClientConfig,
    ExchangeRateApiError,
)
from .exchangerate_provider import ExchangeRateApiProvider
from .schemas import RateTable

__all__ = [
    "BaseRateProvider",
    "ProviderError",
    "UpstreamUnavailable",
    "InvalidBaseCurrency",
    "RateTable",
    "ExchangeRateApiClient",
    "ExchangeRateApiClientConfig",
    "ExchangeRateApiError",
    "ExchangeRateApiProvider",
]
