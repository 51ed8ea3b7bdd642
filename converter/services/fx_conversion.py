"""Pure rate lookup, conversion and rebasing over base-relative rate tables.

Every rate in a :class:`RateTable` is expressed as units of the currency per
one unit of the table's base currency. A pair rate is therefore
``rates[to] / rates[from]`` with the base currency looking up as 1 whether or
not the table carries an explicit self-entry.

Missing data is reported as a :class:`RateUnavailable` value rather than an
exception so callers can fall back without exception-driven control flow.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal, Overflow, getcontext, localcontext
from typing import Dict, Mapping, MutableMapping, Optional

from converter.providers.schemas import RateTable
from converter.utils.datetime import ensure_utc

ROUNDING_PRECISION = 28

ONE = Decimal("1")

EMPTY_TABLE = "empty_table"
MISSING_RATE = "missing_rate"
OUT_OF_RANGE = "out_of_range"


def get_decimal_context():
    """Return the shared Decimal context used across conversions."""

    context = getcontext().copy()
    context.prec = ROUNDING_PRECISION
    context.rounding = ROUND_HALF_EVEN
    return context


def normalize_currency(code: str) -> str:
    """Normalize a currency code to canonical uppercase form."""

    if not code or not str(code).strip():
        raise ValueError("Currency code cannot be blank.")
    normalized = str(code).strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert input into a Decimal rounded to the shared context's precision."""

    try:
        return get_decimal_context().create_decimal(str(value))
    except ArithmeticError as exc:
        raise ValueError(f"Not a representable amount: {value!r}") from exc


def normalize_amount(value: Decimal | int | float | str) -> Decimal:
    """Return ``value`` as a Decimal, rejecting negative or non-finite amounts."""

    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative, got {value!r}")
    return amount


@dataclass(frozen=True)
class RateUnavailable:
    """No rate can be derived for the pair from the table at hand."""

    from_currency: str
    to_currency: str
    reason: str

    @property
    def message(self) -> str:
        if self.reason == EMPTY_TABLE:
            return "No exchange rates are loaded."
        if self.reason == OUT_OF_RANGE:
            return f"Result for {self.from_currency} -> {self.to_currency} is out of range."
        return f"Rate unavailable for {self.from_currency} -> {self.to_currency}."


@dataclass(frozen=True)
class ConversionParams:
    """The (from, to, amount) triple a conversion is requested for."""

    from_currency: str = "EUR"
    to_currency: str = "USD"
    amount: Decimal = ONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_currency", normalize_currency(self.from_currency))
        object.__setattr__(self, "to_currency", normalize_currency(self.to_currency))
        object.__setattr__(self, "amount", normalize_amount(self.amount))

    def merged(self, **changes) -> ConversionParams:
        """Return a copy with every non-``None`` change applied."""

        updates = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **updates)


@dataclass(frozen=True)
class ConversionRecord:
    """A completed conversion; immutable once created."""

    from_currency: str
    to_currency: str
    amount: Decimal
    result: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_currency", normalize_currency(self.from_currency))
        object.__setattr__(self, "to_currency", normalize_currency(self.to_currency))
        object.__setattr__(self, "amount", normalize_amount(self.amount))
        object.__setattr__(self, "result", normalize_amount(self.result))
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))


def _base_relative_rate(table: RateTable, code: str) -> Optional[Decimal]:
    if code == table.base_currency:
        return ONE
    return table.rates.get(code)


def pair_rate(
    table: Optional[RateTable],
    from_currency: str,
    to_currency: str,
) -> Decimal | RateUnavailable:
    """Return units of ``to_currency`` per one unit of ``from_currency``."""

    source = normalize_currency(from_currency)
    target = normalize_currency(to_currency)

    if source == target:
        return ONE

    if table is None or table.is_empty:
        return RateUnavailable(source, target, EMPTY_TABLE)

    from_rate = _base_relative_rate(table, source)
    to_rate = _base_relative_rate(table, target)
    if from_rate is None or to_rate is None:
        return RateUnavailable(source, target, MISSING_RATE)

    with localcontext(get_decimal_context()):
        try:
            return to_rate / from_rate
        except Overflow:
            return RateUnavailable(source, target, OUT_OF_RANGE)


def convert(
    table: Optional[RateTable],
    from_currency: str,
    to_currency: str,
    amount: Decimal | int | float | str,
) -> Decimal | RateUnavailable:
    """Convert ``amount`` of ``from_currency`` into ``to_currency``."""

    normalized_amount = normalize_amount(amount)
    rate = pair_rate(table, from_currency, to_currency)
    if isinstance(rate, RateUnavailable):
        return rate

    with localcontext(get_decimal_context()):
        try:
            return normalized_amount * rate
        except Overflow:
            return RateUnavailable(
                normalize_currency(from_currency), normalize_currency(to_currency), OUT_OF_RANGE
            )


def build_record(
    table: Optional[RateTable],
    params: ConversionParams,
    *,
    timestamp: datetime,
) -> ConversionRecord | RateUnavailable:
    """Run a conversion for ``params`` and wrap it as a history record."""

    result = convert(table, params.from_currency, params.to_currency, params.amount)
    if isinstance(result, RateUnavailable):
        return result
    return ConversionRecord(
        from_currency=params.from_currency,
        to_currency=params.to_currency,
        amount=params.amount,
        result=result,
        timestamp=timestamp,
    )


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def rebase_rates(rates: Mapping[str, Decimal], new_base: str) -> Dict[str, Decimal]:
    """Re-express a mapping of base-relative rates against ``new_base``.

    The mapping must contain ``new_base``; the result contains ``new_base``
    with a rate of exactly 1.
    """

    normalized_rates: MutableMapping[str, Decimal] = {}
    for code, value in rates.items():
        normalized_rates[normalize_currency(code)] = to_decimal(value)

    target_base = normalize_currency(new_base)

    if target_base not in normalized_rates:
        raise RebaseError(f"Missing rate for {target_base} when rebasing rates.")

    base_rate = normalized_rates[target_base]
    if base_rate == 0:
        raise RebaseError(f"Cannot rebase using {target_base} with zero rate.")

    context = get_decimal_context()
    with localcontext(context):
        rebased: Dict[str, Decimal] = {}
        for code, value in normalized_rates.items():
            rebased[code] = value / base_rate

    rebased[target_base] = ONE
    return rebased
