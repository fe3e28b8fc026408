"""
Values -- Immutable, self-validating domain value objects and coercions.

Responsibility:
    Provides ``DateRange`` and the field coercion helpers shared by the
    entity model: Decimal-only money and hours, bounded percentages, and
    half-up rounding to the configured monetary precision.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the entity model, engines and config loader.

Invariants enforced:
    - Monetary amounts and hours are ``Decimal`` (never float).
    - ``DateRange.end >= DateRange.start``.
    - Percentages lie in 0..100.

Failure modes:
    - InvalidRangeError when a range ends before it starts.
    - NegativeAmountError / InvalidPercentageError on out-of-domain values.
    - ValueError when a value cannot be converted to Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from staffing_kernel.exceptions import (
    InvalidPercentageError,
    InvalidRangeError,
    NegativeAmountError,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_MONEY_PLACES = 2


def to_decimal(value: Decimal | int | float | str, field_name: str = "value") -> Decimal:
    """
    Coerce a numeric value to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got bool")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {field_name}: {value!r}") from e


def non_negative(value: Decimal | int | float | str, field_name: str) -> Decimal:
    """Coerce to Decimal and reject negatives."""
    amount = to_decimal(value, field_name)
    if amount < ZERO:
        raise NegativeAmountError(field_name, amount)
    return amount


def percentage(value: int | Decimal, field_name: str) -> int | Decimal:
    """Validate a 0..100 percentage, keeping its numeric type."""
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise InvalidPercentageError(field_name, value)
    if value < 0 or value > 100:
        raise InvalidPercentageError(field_name, value)
    return value


def round_money(amount: Decimal, places: int = DEFAULT_MONEY_PLACES) -> Decimal:
    """Round half-up to ``places`` decimal places."""
    quantum = Decimal(1).scaleb(-places)
    return amount.quantize(quantum, rounding=ROUND_HALF_UP)


def round_percent(value: Decimal) -> Decimal:
    """Round a percentage half-up to two decimal places."""
    return round_money(value, 2)


@dataclass(frozen=True, slots=True)
class DateRange:
    """
    Closed calendar interval [start, end].

    Contract:
        Both ends inclusive.  A single-day range has ``start == end``.

    Guarantees:
        - ``end >= start`` (InvalidRangeError otherwise).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidRangeError(self.start.isoformat(), self.end.isoformat())

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
