"""Abstract interface for exchange-rate table providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .schemas import RateTable


class ProviderError(Exception):
    """Raised when a provider cannot produce a rate table."""


class UpstreamUnavailable(ProviderError):
    """The upstream source was unreachable or returned malformed data."""


class InvalidBaseCurrency(ProviderError):
    """The requested base currency is not recognized by the upstream source."""

    def __init__(self, base: str, message: str | None = None) -> None:
        super().__init__(message or f"Base currency '{base}' is not supported by the rate source.")
        self.base = base


class BaseRateProvider(ABC):
    """Defines the interface all rate providers must implement."""

    name: str

    @abstractmethod
    def fetch(self, base: str) -> RateTable:
        """Return a complete rate table expressed relative to ``base``.

        Raises:
            UpstreamUnavailable: The source is unreachable or its payload is malformed.
            InvalidBaseCurrency: The source does not recognize ``base``.
        """
