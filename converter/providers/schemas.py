"""Dataclasses describing normalized exchange-rate tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Mapping, Optional

from converter.utils.datetime import ensure_utc

ONE = Decimal("1")


def _normalize_code(code: str) -> str:
    normalized = str(code).strip().upper()
    if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
        raise ValueError(f"Currency code must be three ASCII letters: {code!r}")
    return normalized


def _normalize_rate(code: str, value: Decimal | float | int | str) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Rate for {code} is not numeric: {value!r}") from exc
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f"Rate for {code} must be a positive finite number, got {value!r}")
    return rate


def _normalize_rates(base: str, rates: Mapping[str, Decimal | float | int | str]) -> Dict[str, Decimal]:
    normalized: Dict[str, Decimal] = {}
    for code, value in rates.items():
        key = _normalize_code(code)
        if key in normalized:
            raise ValueError(f"Duplicate rate entry for {key}")
        normalized[key] = _normalize_rate(key, value)

    if base in normalized and normalized[base] != ONE:
        raise ValueError(
            f"Rate of base currency {base} to itself must be 1, got {normalized[base]}"
        )
    return normalized


@dataclass(frozen=True)
class RateTable:
    """Rates for every known currency, expressed as units per 1 unit of ``base_currency``."""

    base_currency: str
    fetched_at: datetime
    source: str
    rates: Dict[str, Decimal] = field(default_factory=dict)
    published_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        base = _normalize_code(self.base_currency)
        object.__setattr__(self, "base_currency", base)
        object.__setattr__(self, "rates", _normalize_rates(base, self.rates))
        object.__setattr__(self, "fetched_at", ensure_utc(self.fetched_at))
        if self.published_at is not None:
            object.__setattr__(self, "published_at", ensure_utc(self.published_at))
        if not self.source or not self.source.strip():
            raise ValueError("source must be provided for RateTable")

    @classmethod
    def empty(cls, base_currency: str, *, source: str, fetched_at: datetime) -> RateTable:
        return cls(base_currency=base_currency, fetched_at=fetched_at, source=source, rates={})

    @property
    def is_empty(self) -> bool:
        return not self.rates

    @property
    def currencies(self) -> List[str]:
        """Sorted codes this table can price, including the base."""

        if self.is_empty:
            return []
        return sorted(set(self.rates) | {self.base_currency})

    def age(self, now: datetime) -> timedelta:
        return ensure_utc(now) - self.fetched_at
