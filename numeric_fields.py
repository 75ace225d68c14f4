"""
Numeric field adapters.

Every algorithm in this package is written once against the small capability
set below and runs unchanged over floats or exact rationals:

- FloatField: Python floats, zero test |x| < tolerance
- RationalField: exact Rational values, zero test numerator == 0
"""

import math
from numbers import Integral
from typing import Any, Optional

from exact_rational import DEFAULT_MAX_DENOMINATOR, Rational


DEFAULT_TOLERANCE = 1e-10


class NumericField:
    """
    Arithmetic capability set shared by the float and rational adapters.

    Subclasses implement coerce/add/subtract/multiply/divide/is_zero/
    magnitude/to_float/format; the remaining helpers are derived.
    """

    exact = False
    name = "abstract"

    def coerce(self, value: Any) -> Any:
        raise NotImplementedError

    def zero(self) -> Any:
        return self.coerce(0)

    def one(self) -> Any:
        return self.coerce(1)

    def add(self, a: Any, b: Any) -> Any:
        raise NotImplementedError

    def subtract(self, a: Any, b: Any) -> Any:
        raise NotImplementedError

    def multiply(self, a: Any, b: Any) -> Any:
        raise NotImplementedError

    def divide(self, a: Any, b: Any) -> Any:
        raise NotImplementedError

    def negate(self, a: Any) -> Any:
        return self.subtract(self.zero(), a)

    def is_zero(self, a: Any) -> bool:
        raise NotImplementedError

    def magnitude(self, a: Any) -> float:
        """Absolute value as a float; only used to rank pivot candidates."""
        raise NotImplementedError

    def to_float(self, a: Any) -> float:
        raise NotImplementedError

    def to_rational(self, a: Any) -> Optional[Rational]:
        """Exact view of a value, None when the field is not exact."""
        return None

    def format(self, a: Any) -> str:
        raise NotImplementedError

    def sign_of(self, exponent: int) -> Any:
        """(-1)^exponent as a field value."""
        return self.one() if exponent % 2 == 0 else self.negate(self.one())

    def __repr__(self):
        return f"{type(self).__name__}()"


class FloatField(NumericField):
    """Floating-point adapter with tolerance-based zero detection."""

    exact = False
    name = "decimal"

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        if tolerance < 0:
            raise ValueError(f"tolerance must be non-negative (got {tolerance})")
        self.tolerance = tolerance

    def coerce(self, value: Any) -> float:
        if isinstance(value, str):
            return float(Rational.parse(value))
        return float(value)

    def add(self, a, b):
        return a + b

    def subtract(self, a, b):
        return a - b

    def multiply(self, a, b):
        return a * b

    def divide(self, a, b):
        return a / b

    def negate(self, a):
        return -a

    def is_zero(self, a) -> bool:
        return abs(a) < self.tolerance

    def magnitude(self, a) -> float:
        return abs(a)

    def to_float(self, a) -> float:
        return float(a)

    def format(self, a) -> str:
        return format_decimal(a, tolerance=self.tolerance)

    def __repr__(self):
        return f"FloatField(tolerance={self.tolerance!r})"


class RationalField(NumericField):
    """Exact adapter over Rational."""

    exact = True
    name = "fraction"

    def __init__(self, max_denominator: int = DEFAULT_MAX_DENOMINATOR):
        if max_denominator < 1:
            raise ValueError(f"max_denominator must be >= 1 (got {max_denominator})")
        self.max_denominator = max_denominator

    def coerce(self, value: Any) -> Rational:
        if isinstance(value, Rational):
            return value
        if isinstance(value, Integral):
            return Rational(int(value), 1)
        if isinstance(value, str):
            return Rational.parse(value, self.max_denominator)
        return Rational.from_decimal(float(value), self.max_denominator)

    def add(self, a, b):
        return a.add(b)

    def subtract(self, a, b):
        return a.subtract(b)

    def multiply(self, a, b):
        return a.multiply(b)

    def divide(self, a, b):
        return a.divide(b)

    def negate(self, a):
        return a.negate()

    def is_zero(self, a) -> bool:
        return a.is_zero()

    def magnitude(self, a) -> float:
        return a.abs().to_decimal()

    def to_float(self, a) -> float:
        return a.to_decimal()

    def to_rational(self, a) -> Rational:
        return self.coerce(a)

    def format(self, a) -> str:
        return str(a)

    def __repr__(self):
        return f"RationalField(max_denominator={self.max_denominator!r})"


def format_decimal(value: float, precision: int = 4, tolerance: float = DEFAULT_TOLERANCE) -> str:
    """
    Display form of a float: "0" below tolerance, otherwise rounded to
    `precision` decimals with trailing zeros removed (2.0 -> "2", 1.5 -> "1.5").
    """
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return str(value)
    if abs(value) < tolerance:
        return "0"
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


FLOAT_FIELD = FloatField()
RATIONAL_FIELD = RationalField()


def field_for(exact: bool) -> NumericField:
    """Shared default field for the requested mode."""
    return RATIONAL_FIELD if exact else FLOAT_FIELD
