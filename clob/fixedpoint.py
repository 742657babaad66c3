"""Fixed-point decimal numbers for prices, quantities and fees.

A :class:`Decimal` is an integer mantissa plus a number of decimal places.
Binary floating point is never used for money or quantities.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

__all__ = [
    "DecimalError",
    "PrecisionMismatchError",
    "Decimal",
    "zero",
    "parse_decimal",
    "min_decimal",
    "max_decimal",
]

MAX_PRECISION = 18

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")


class DecimalError(ValueError):
    """Raised when a decimal cannot be parsed or constructed."""


class PrecisionMismatchError(DecimalError):
    """Raised when two decimals of different precision are combined."""


def _check_precision(precision: int) -> None:
    if not isinstance(precision, int) or not 0 <= precision <= MAX_PRECISION:
        raise DecimalError(
            f"precision must be an integer between 0 and {MAX_PRECISION}, got {precision!r}"
        )


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _parse_int64(part: str, original: str) -> int:
    if not _INTEGER.fullmatch(part):
        raise DecimalError(f"invalid decimal {original!r}")
    number = int(part)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise DecimalError(f"invalid decimal {original!r}: value out of range")
    return number


@dataclass(frozen=True, eq=False)
class Decimal:
    """A fixed-point number: ``value`` scaled by ``10 ** -precision``.

    ``Decimal(10125, 2)`` is 101.25.
    """

    value: int
    precision: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int):
            raise DecimalError(f"mantissa must be an integer, got {self.value!r}")
        _check_precision(self.precision)

    def _same_precision(self, other: Decimal) -> None:
        if self.precision != other.precision:
            raise PrecisionMismatchError(
                f"precision mismatch: {self.precision} vs {other.precision}"
            )

    def __add__(self, other: Decimal) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return Decimal(self.value + other.value, self.precision)

    def __sub__(self, other: Decimal) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return Decimal(self.value - other.value, self.precision)

    def __neg__(self) -> Decimal:
        return Decimal(-self.value, self.precision)

    def __abs__(self) -> Decimal:
        return Decimal(abs(self.value), self.precision)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return self.value == other.value

    def __lt__(self, other: Decimal) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return self.value < other.value

    def __le__(self, other: Decimal) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return self.value <= other.value

    def __gt__(self, other: Decimal) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return self.value > other.value

    def __ge__(self, other: Decimal) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        self._same_precision(other)
        return self.value >= other.value

    def __hash__(self) -> int:
        return hash((self.value, self.precision))

    def __str__(self) -> str:
        if self.precision == 0:
            return str(self.value)
        sign = "-" if self.value < 0 else ""
        int_part, frac_part = divmod(abs(self.value), 10**self.precision)
        return f"{sign}{int_part}.{frac_part:0{self.precision}d}"

    def mul_int(self, n: int) -> Decimal:
        """Return this decimal scaled by the integer ``n``."""
        return Decimal(self.value * n, self.precision)

    def mul(self, other: Decimal) -> Decimal:
        """Return the product at this precision, truncated toward zero."""
        self._same_precision(other)
        magnitude = abs(self.value) * abs(other.value) // 10**other.precision
        negative = (self.value < 0) != (other.value < 0)
        return Decimal(-magnitude if negative else magnitude, self.precision)

    def div(self, other: Decimal, out_precision: int) -> Decimal:
        """Return the quotient at ``out_precision``, truncated toward zero."""
        if other.value == 0:
            raise ZeroDivisionError("decimal division by zero")
        _check_precision(out_precision)
        scale = out_precision + other.precision - self.precision
        if scale >= 0:
            numerator = self.value * 10**scale
        else:
            numerator = _trunc_div(self.value, 10**-scale)
        return Decimal(_trunc_div(numerator, other.value), out_precision)

    def is_zero(self) -> bool:
        return self.value == 0

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def is_valid_tick(self, tick_size: Decimal) -> bool:
        """True if this is a positive multiple of ``tick_size``."""
        self._same_precision(tick_size)
        if self.value <= 0 or tick_size.value <= 0:
            return False
        return self.value % tick_size.value == 0

    def is_valid_lot(self, lot_size: Decimal) -> bool:
        """True if this is a positive multiple of ``lot_size``."""
        self._same_precision(lot_size)
        if self.value <= 0 or lot_size.value <= 0:
            return False
        return self.value % lot_size.value == 0

    def to_json(self) -> str:
        """Serialise as a quoted decimal string."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, text: str | bytes, precision: int) -> Decimal:
        """Parse a quoted decimal string produced by :meth:`to_json`."""
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DecimalError(f"invalid JSON decimal: {exc}") from exc
        if not isinstance(loaded, str):
            raise DecimalError(f"JSON decimal must be a string, got {loaded!r}")
        return parse_decimal(loaded, precision)

    @classmethod
    def from_string(cls, text: str) -> Decimal:
        """Parse ``text`` with the precision given by its fractional digits."""
        _, dot, fraction = text.partition(".")
        precision = len(fraction) if dot else 0
        if precision > MAX_PRECISION:
            raise DecimalError(
                f"decimal {text!r} has {precision} fractional digits, max is {MAX_PRECISION}"
            )
        return parse_decimal(text, precision)


def zero(precision: int) -> Decimal:
    """Return zero at ``precision``."""
    return Decimal(0, precision)


def parse_decimal(text: str, precision: int) -> Decimal:
    """Parse a string such as ``"101.25"`` at the given precision."""
    _check_precision(precision)
    if not text:
        raise DecimalError("empty decimal string")

    body = text
    negative = body.startswith("-")
    if negative:
        body = body[1:]
        if not body:
            raise DecimalError("invalid decimal: bare minus")

    int_part, dot, frac_part = body.partition(".")
    if dot and len(frac_part) > precision:
        raise DecimalError(
            f"decimal {body!r} has {len(frac_part)} fractional digits, max is {precision}"
        )

    int_value = _parse_int64(int_part or "0", text)
    frac_part = frac_part.ljust(precision, "0")
    frac_value = _parse_int64(frac_part, text) if frac_part else 0

    result = int_value * 10**precision + frac_value
    if negative:
        result = -result
    if not _INT64_MIN <= result <= _INT64_MAX:
        raise DecimalError(f"invalid decimal {text!r}: value out of range")
    return Decimal(result, precision)


def min_decimal(a: Decimal, b: Decimal) -> Decimal:
    """Return the smaller of two decimals of equal precision."""
    return a if a <= b else b


def max_decimal(a: Decimal, b: Decimal) -> Decimal:
    """Return the larger of two decimals of equal precision."""
    return a if a >= b else b