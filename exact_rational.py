"""
Exact Rational Arithmetic

This module provides the Rational type used by every exact computation in the
package. Values are kept in lowest terms with a strictly positive denominator,
so two equal rationals always carry the same (numerator, denominator) pair.

Usage Example:
--------------
    from exact_rational import Rational

    third = Rational.from_decimal(0.3333333333333333)
    print(third)                      # 1/3
    print(third + Rational(1, 6))     # 1/2
    print(Rational(3, -6).to_latex()) # -\\frac{1}{2}
"""

import math
import warnings
from numbers import Integral
from typing import Union

import sympy as sp


DEFAULT_MAX_DENOMINATOR = 10000
DECIMAL_TOLERANCE = 1e-10

RationalLike = Union["Rational", int]


class Rational:
    """
    Immutable fraction numerator/denominator in lowest terms.

    Attributes:
    -----------
    numerator : int
        Signed numerator (carries the sign of the value)
    denominator : int
        Strictly positive denominator

    Methods:
    --------
    add(other), subtract(other), multiply(other), divide(other):
        Fraction arithmetic, each result re-normalized
    from_decimal(value, max_denominator):
        Continued-fraction approximation of a float
    parse(text):
        Read "3", "-3/4" or "0.25"
    to_decimal(), to_latex(), to_html(), to_sympy():
        Conversions for display and verification
    """

    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: int, denominator: int = 1):
        if not isinstance(numerator, Integral) or not isinstance(denominator, Integral):
            raise TypeError(
                f"Rational components must be integers, got "
                f"{type(numerator).__name__} and {type(denominator).__name__}"
            )
        if denominator == 0:
            raise ZeroDivisionError("Rational denominator cannot be zero")

        numerator = int(numerator)
        denominator = int(denominator)
        g = math.gcd(numerator, denominator)
        numerator //= g
        denominator //= g
        if denominator < 0:
            numerator = -numerator
            denominator = -denominator

        object.__setattr__(self, "_numerator", numerator)
        object.__setattr__(self, "_denominator", denominator)

    def __setattr__(self, name, value):
        raise AttributeError("Rational values are immutable")

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    # ------------------------------ Construction ------------------------------
    @classmethod
    def from_decimal(
        cls,
        value: float,
        max_denominator: int = DEFAULT_MAX_DENOMINATOR,
        warn_on_approximation: bool = False,
    ) -> "Rational":
        """
        Convert a decimal to the closest low-denominator fraction.

        Integral values are returned directly as value/1. Otherwise the
        continued fraction of |value| is expanded, keeping the convergents
        h/k, until |value - h/k| <= 1e-10 or the next convergent would need a
        denominator above max_denominator. In the latter case the last
        convergent inside the limit is returned.

        Parameters:
        -----------
        value : float
            Decimal to convert (int and Rational are accepted as-is)
        max_denominator : int
            Largest denominator allowed in the result (default 10000)
        warn_on_approximation : bool
            If True, emit a UserWarning when the limit stops the expansion
            before the tolerance is reached

        Returns:
        --------
        Rational

        Raises:
        -------
        ValueError
            If value is NaN or infinite, or max_denominator < 1

        Examples:
        ---------
        >>> str(Rational.from_decimal(0.1))
        '1/10'
        >>> str(Rational.from_decimal(-2.5))
        '-5/2'
        """
        if isinstance(value, Rational):
            return value
        if isinstance(value, Integral):
            return cls(int(value), 1)
        if max_denominator < 1:
            raise ValueError(f"max_denominator must be >= 1 (got {max_denominator})")

        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Cannot convert non-finite value {value!r} to a Rational")
        if value == 0:
            return cls(0, 1)

        sign = -1 if value < 0 else 1
        target = abs(value)
        if target.is_integer():
            return cls(sign * int(target), 1)

        # Convergents: (h1, k1) is the current one, (h2, k2) the previous
        h1, h2 = 1, 0
        k1, k2 = 0, 1
        x = target
        while True:
            a = math.floor(x)
            h_next = a * h1 + h2
            k_next = a * k1 + k2
            if k_next > max_denominator:
                if warn_on_approximation:
                    warnings.warn(
                        f"Decimal {value!r} approximated as {sign * h1}/{k1}: "
                        f"denominator limit {max_denominator} reached before "
                        f"tolerance {DECIMAL_TOLERANCE}",
                        UserWarning,
                    )
                break
            h1, h2 = h_next, h1
            k1, k2 = k_next, k1

            if abs(target - h1 / k1) <= DECIMAL_TOLERANCE:
                break
            remainder = x - a
            if remainder == 0:
                break
            x = 1.0 / remainder
            if not math.isfinite(x):
                break

        return cls(sign * h1, k1)

    @classmethod
    def parse(
        cls,
        text: str,
        max_denominator: int = DEFAULT_MAX_DENOMINATOR,
        warn_on_approximation: bool = False,
    ) -> "Rational":
        """
        Parse "7", "-3/4" or "0.25" into a Rational.

        Decimal text goes through from_decimal, so "0.3333333333333333"
        becomes 1/3. With warn_on_approximation, a decimal that needs a
        denominator above max_denominator emits a UserWarning naming the
        fraction used instead.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be a string, got {type(text).__name__}")
        s = text.strip()
        if not s:
            raise ValueError("Cannot parse an empty string as a Rational")
        try:
            if "/" in s:
                num_s, den_s = s.split("/", 1)
                return cls(int(num_s.strip()), int(den_s.strip()))
            try:
                return cls(int(s), 1)
            except ValueError:
                return cls.from_decimal(float(s), max_denominator, warn_on_approximation)
        except ValueError as e:
            raise ValueError(
                f"Invalid rational literal '{text}'. Expected an integer, "
                f"a decimal or 'p/q'"
            ) from e

    @staticmethod
    def _lift(other: RationalLike) -> "Rational":
        if isinstance(other, Rational):
            return other
        if isinstance(other, Integral):
            return Rational(int(other), 1)
        raise TypeError(f"Expected Rational or int, got {type(other).__name__}")

    # ------------------------------- Arithmetic -------------------------------
    def add(self, other: RationalLike) -> "Rational":
        other = self._lift(other)
        return Rational(
            self._numerator * other._denominator + other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def subtract(self, other: RationalLike) -> "Rational":
        other = self._lift(other)
        return Rational(
            self._numerator * other._denominator - other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def multiply(self, other: RationalLike) -> "Rational":
        other = self._lift(other)
        return Rational(
            self._numerator * other._numerator,
            self._denominator * other._denominator,
        )

    def divide(self, other: RationalLike) -> "Rational":
        other = self._lift(other)
        if other._numerator == 0:
            raise ZeroDivisionError("Cannot divide by a zero Rational")
        return Rational(
            self._numerator * other._denominator,
            self._denominator * other._numerator,
        )

    def negate(self) -> "Rational":
        return Rational(-self._numerator, self._denominator)

    def abs(self) -> "Rational":
        return Rational(abs(self._numerator), self._denominator)

    def clone(self) -> "Rational":
        return Rational(self._numerator, self._denominator)

    # ------------------------------- Predicates -------------------------------
    def is_zero(self) -> bool:
        return self._numerator == 0

    def is_integer(self) -> bool:
        return self._denominator == 1

    def equals(self, other: "Rational") -> bool:
        """Compare normalized (numerator, denominator) pairs."""
        return (
            self._numerator == other._numerator
            and self._denominator == other._denominator
        )

    def less_than(self, other: RationalLike) -> bool:
        other = self._lift(other)
        return self._numerator * other._denominator < other._numerator * self._denominator

    # ------------------------------- Conversion -------------------------------
    def to_decimal(self) -> float:
        return self._numerator / self._denominator

    def to_sympy(self) -> sp.Rational:
        return sp.Rational(self._numerator, self._denominator)

    def to_latex(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        sign = "-" if self._numerator < 0 else ""
        return f"{sign}\\frac{{{abs(self._numerator)}}}{{{self._denominator}}}"

    def to_html(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        sign = "-" if self._numerator < 0 else ""
        return (
            f'{sign}<span class="fraction"><span class="numerator">{abs(self._numerator)}'
            f'</span><span class="denominator">{self._denominator}</span></span>'
        )

    # ---------------------------- Python protocol -----------------------------
    def __add__(self, other):
        try:
            return self.add(other)
        except TypeError:
            return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        try:
            return self.subtract(other)
        except TypeError:
            return NotImplemented

    def __rsub__(self, other):
        try:
            return self._lift(other).subtract(self)
        except TypeError:
            return NotImplemented

    def __mul__(self, other):
        try:
            return self.multiply(other)
        except TypeError:
            return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other):
        try:
            return self.divide(other)
        except TypeError:
            return NotImplemented

    def __rtruediv__(self, other):
        try:
            return self._lift(other).divide(self)
        except TypeError:
            return NotImplemented

    def __neg__(self):
        return self.negate()

    def __abs__(self):
        return self.abs()

    def __float__(self) -> float:
        return self.to_decimal()

    def __bool__(self) -> bool:
        return self._numerator != 0

    def __eq__(self, other) -> bool:
        if isinstance(other, Rational):
            return self.equals(other)
        if isinstance(other, Integral):
            return self._denominator == 1 and self._numerator == other
        return NotImplemented

    def __lt__(self, other):
        try:
            return self.less_than(other)
        except TypeError:
            return NotImplemented

    def __le__(self, other):
        try:
            return self.less_than(other) or self == self._lift(other)
        except TypeError:
            return NotImplemented

    def __gt__(self, other):
        try:
            return self._lift(other).less_than(self)
        except TypeError:
            return NotImplemented

    def __ge__(self, other):
        try:
            return self._lift(other).less_than(self) or self == self._lift(other)
        except TypeError:
            return NotImplemented

    def __hash__(self) -> int:
        if self._denominator == 1:
            return hash(self._numerator)
        return hash((self._numerator, self._denominator))

    def __str__(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"

    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"

    def __reduce__(self):
        return (Rational, (self._numerator, self._denominator))
