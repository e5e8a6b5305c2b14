"""
MPFloat: an arbitrary-precision binary float that behaves like an ordinary Python number.

Values share copy-on-write storage: copies are free, and a handle mutated in place (set(),
add_inplace(), +=, ...) first moves to private storage whenever another handle still references it.
Every operation that may round comes in two forms that compute the same result:

    pure      x.add(y, rounding)          -> (MPFloat, Ternary), x and y untouched
    in place  x.add_inplace(y, rounding)  -> Ternary, x overwritten

Results take the receiver's precision. The Ternary is the sign of (stored result - exact result).
"""

# Standard library -----------------------------------------------------------------------------------------------------
import operator
import sys
from decimal import Decimal
from fractions import Fraction
from math import floor
from typing import Any, Callable, Self

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2

# Local ----------------------------------------------------------------------------------------------------------------
from .config import resolve_precision, resolve_rounding
from .engine import engine_context, evaluate, round_to
from .formatting import to_string
from .functions import MathMixin, as_number
from .rounding import RoundingMode, Ternary
from .storage import StorageCell, make_unique
from .utils import check_non_negative, check_precision, class_name

# Constants ------------------------------------------------------------------------------------------------------------

SCALAR_TYPES = (int, float, Fraction, Decimal, gmpy2.mpz, gmpy2.mpq, gmpy2.mpfr)


# Classes --------------------------------------------------------------------------------------------------------------

class MPFloat(MathMixin):
    """
    Arbitrary-precision binary floating-point value.

    Args:
        value: MPFloat, int, float, Fraction, Decimal, gmpy2 number, or a base-10 numeral string
            which must be consumed entirely (surrounding whitespace allowed). None gives NaN.
        precision: Precision in bits; None takes the precision of an MPFloat value, otherwise
            the process-wide default.
        rounding: Rounding mode used if value is not representable at precision.

    Raises:
        TypeError: If value has an unsupported type.
        ValueError: If a string value is not a valid numeral, or precision is out of range.

    Examples:
        >>> x = MPFloat("0.1", precision=100)
        >>> y = x                      # same handle
        >>> z = MPFloat(x)             # new handle, shared storage
        >>> z += 1                     # z moves to private storage, x is unchanged
        >>> x.to_string(digits=5), z.to_string(digits=5)
        ('0.1', '1.1')
    """

    __slots__ = ("_cell", "__weakref__")

    def __init__(self, value: Any = None, *, precision: int | None = None,
                 rounding: RoundingMode | str | None = None):
        if isinstance(value, MPFloat) and (precision is None or precision == value.precision):
            self._cell = value._cell.attach(self)
            return

        if isinstance(value, str):
            cell = self._cell_from_text(value, precision, rounding)
        else:
            if precision is None and isinstance(value, MPFloat):
                precision = value.precision
            prec = resolve_precision(precision)
            number = gmpy2.nan() if value is None else as_number(value)
            cell = StorageCell(prec, round_to(number, prec, resolve_rounding(rounding)).number)
        self._cell = cell.attach(self)

    @classmethod
    def from_string(cls, text: str, base: int = 10, precision: int | None = None,
                    rounding: RoundingMode | str | None = None) -> Self | None:
        """
        Parse a numeral that must be consumed entirely, trailing whitespace aside.

        Returns:
            The value, or None if text is not a valid numeral in base, has trailing content,
            or base is unsupported.
        """
        from .parsing import parse

        result = parse(text, base, precision, rounding)
        if result is None or text[result.end:].strip():
            return None
        return cls._wrap(result.value.mpfr, result.value.precision)

    @classmethod
    def _wrap(cls, number: Any, precision: int) -> Self:
        """New handle over an engine number which already has the given precision."""
        obj = cls.__new__(cls)
        obj._cell = StorageCell(precision, number).attach(obj)
        return obj

    @staticmethod
    def _cell_from_text(text: str, precision: int | None, rounding: RoundingMode | str | None) -> StorageCell:
        parsed = MPFloat.from_string(text, 10, precision, rounding)
        if parsed is None:
            raise ValueError(f"could not convert string to MPFloat: {text!r}")
        return StorageCell(parsed.precision, parsed.mpfr)

    # Storage --------------------------------------------------------------------------------------------------------

    @property
    def precision(self) -> int:
        """Precision in bits."""
        return self._cell.precision

    @property
    def mpfr(self) -> Any:
        """The underlying gmpy2.mpfr. Engine numbers are immutable, so exposing it is safe."""
        return self._cell.number

    def _detached(self) -> Self:
        """New handle with private storage holding the same value and precision."""
        obj = type(self).__new__(type(self))
        obj._cell = self._cell.clone_for(obj)
        return obj

    def _apply(self, fn: Callable[..., Any], *args: Any, rounding: RoundingMode | str | None = None,
               exact: bool = False) -> Ternary:
        """Evaluate fn(*args) at this value's precision and store the result in place."""
        outcome = evaluate(fn, *args, precision=self.precision, rounding=resolve_rounding(rounding))
        make_unique(self).number = outcome.number
        return Ternary.EXACT if exact else outcome.ternary

    def _pure(self, method: Callable[..., Ternary], *args: Any, **kwargs: Any) -> tuple[Self, Ternary]:
        """Run an in-place method on a private copy and return (copy, ternary)."""
        result = self._detached()
        ternary = method(result, *args, **kwargs)
        return result, ternary

    # Assignment -----------------------------------------------------------------------------------------------------

    def set(self, value: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        """Overwrite with value rounded to this value's precision, keeping the precision."""
        outcome = round_to(as_number(value), self.precision, resolve_rounding(rounding))
        make_unique(self).number = outcome.number
        return outcome.ternary

    def set_string(self, text: str, base: int = 10, rounding: RoundingMode | str | None = None) -> bool:
        """
        Overwrite with a numeral parsed at this value's precision.

        Returns:
            True on success. On failure (invalid numeral, trailing content, unsupported base)
            returns False and the value is unchanged.
        """
        parsed = MPFloat.from_string(text, base, self.precision, rounding)
        if parsed is None:
            return False
        make_unique(self).number = parsed.mpfr
        return True

    def swap(self, other: "MPFloat") -> None:
        """Exchange value and precision with other."""
        if not isinstance(other, MPFloat):
            raise TypeError(f"can only swap with MPFloat, but got {class_name(other)}")
        mine, theirs = self._cell, other._cell
        mine.detach(self)
        theirs.detach(other)
        self._cell = theirs.attach(self)
        other._cell = mine.attach(other)

    def set_precision(self, precision: int, rounding: RoundingMode | str | None = None) -> Ternary:
        """
        Change the precision, rounding the current value to it.

        The value moves to new storage; other handles sharing the old storage keep the old precision.
        """
        check_precision(precision)
        outcome = round_to(self.mpfr, precision, resolve_rounding(rounding))
        self._cell.detach(self)
        self._cell = StorageCell(precision, outcome.number).attach(self)
        return outcome.ternary

    # Classification -------------------------------------------------------------------------------------------------

    @property
    def sign(self) -> int:
        """-1, 0 or 1; NaN and both zeros give 0."""
        number = self.mpfr
        if number.is_nan() or number.is_zero():
            return 0
        return -1 if number < 0 else 1

    @property
    def signbit(self) -> bool:
        """True if the sign bit is set, including -0 and negative NaN."""
        return self.mpfr.is_signed()

    @property
    def is_nan(self) -> bool:
        return self.mpfr.is_nan()

    @property
    def is_inf(self) -> bool:
        return self.mpfr.is_infinite()

    @property
    def is_zero(self) -> bool:
        return self.mpfr.is_zero()

    @property
    def is_finite(self) -> bool:
        return self.mpfr.is_finite()

    @property
    def is_regular(self) -> bool:
        """Finite and non-zero."""
        return self.mpfr.is_regular()

    @property
    def is_integer(self) -> bool:
        return self.mpfr.is_integer()

    @property
    def is_negative(self) -> bool:
        """Strictly below zero; -0 is not negative."""
        return self.sign < 0

    @property
    def is_positive(self) -> bool:
        return self.sign > 0

    # Conversion -----------------------------------------------------------------------------------------------------

    def to_float(self, rounding: RoundingMode | str | None = None) -> float:
        """Convert to a Python float, rounding with the given mode."""
        with engine_context(53, resolve_rounding(rounding)):
            return float(self.mpfr)

    def to_float_exp(self, rounding: RoundingMode | str | None = None) -> tuple[float, int]:
        """
        Split into (mantissa, exponent) with value == mantissa * 2**exponent.

        The mantissa magnitude lies in [0.5, 1) and carries the sign, like math.frexp(). Zeros,
        infinities and NaN come back as (value, 0).
        """
        number = self.mpfr
        if not number.is_regular():
            return self.to_float(rounding), 0
        exponent, mantissa = gmpy2.frexp(number)
        with engine_context(53, resolve_rounding(rounding)):
            fraction = float(mantissa)
        # Rounding to 53 bits can carry the mantissa up to 1.0
        if abs(fraction) == 1.0:
            fraction, exponent = fraction / 2, exponent + 1
        return fraction, int(exponent)

    def to_int(self, rounding: RoundingMode | str | None = None) -> int:
        """
        Round to an integer with the given mode.

        Raises:
            ValueError: If the value is NaN.
            OverflowError: If the value is infinite.
        """
        number = self.mpfr
        if number.is_nan():
            raise ValueError("cannot convert NaN to integer")
        if number.is_infinite():
            raise OverflowError("cannot convert infinity to integer")
        with engine_context(self.precision, resolve_rounding(rounding)):
            return int(gmpy2.rint(number))

    def to_string(self, base: int = 10, digits: int = 0, rounding: RoundingMode | str | None = None) -> str:
        """Positional numeral in base; see formatting.to_string()."""
        return to_string(self, base, digits, rounding)

    def __float__(self) -> float:
        return self.to_float(RoundingMode.NEAREST)

    def __int__(self) -> int:
        return self.to_int(RoundingMode.TOWARD_ZERO)

    def __bool__(self) -> bool:
        return not self.mpfr.is_zero()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"MPFloat('{self.to_string()}', precision={self.precision})"

    def __format__(self, format_spec: str) -> str:
        """Format with the gmpy2 mpfr mini-language, e.g. '.10f' or '.5Zf'."""
        if not format_spec:
            return str(self)
        return format(self.mpfr, format_spec)

    def __hash__(self) -> int:
        number = self.mpfr
        if number.is_nan():
            return sys.hash_info.nan
        return hash(number)

    def __copy__(self) -> Self:
        return type(self)(self)

    def __deepcopy__(self, memo: dict) -> Self:
        return type(self)(self)

    # Arithmetic -----------------------------------------------------------------------------------------------------

    def add_inplace(self, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(gmpy2.add, self.mpfr, as_number(other), rounding=rounding)

    def add(self, other: Any, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (self + other, ternary) at this value's precision."""
        return self._pure(MPFloat.add_inplace, other, rounding)

    def sub_inplace(self, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(gmpy2.sub, self.mpfr, as_number(other), rounding=rounding)

    def sub(self, other: Any, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (self - other, ternary) at this value's precision."""
        return self._pure(MPFloat.sub_inplace, other, rounding)

    def mul_inplace(self, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(gmpy2.mul, self.mpfr, as_number(other), rounding=rounding)

    def mul(self, other: Any, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (self * other, ternary) at this value's precision."""
        return self._pure(MPFloat.mul_inplace, other, rounding)

    def div_inplace(self, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(gmpy2.div, self.mpfr, as_number(other), rounding=rounding)

    def div(self, other: Any, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """
        Return (self / other, ternary) at this value's precision.

        Division by zero follows IEEE 754: a signed infinity for a non-zero numerator, NaN for 0/0.
        """
        return self._pure(MPFloat.div_inplace, other, rounding)

    def neg_inplace(self, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(operator.neg, self.mpfr, rounding=rounding, exact=True)

    def neg(self, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (-self, Ternary.EXACT)."""
        return self._pure(MPFloat.neg_inplace, rounding)

    def absolute_inplace(self, rounding: RoundingMode | str | None = None) -> Ternary:
        return self._apply(operator.abs, self.mpfr, rounding=rounding, exact=True)

    def absolute(self, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (|self|, Ternary.EXACT)."""
        return self._pure(MPFloat.absolute_inplace, rounding)

    def mul_2exp_inplace(self, exponent: int, rounding: RoundingMode | str | None = None) -> Ternary:
        if not isinstance(exponent, int) or isinstance(exponent, bool):
            raise TypeError(f"exponent must be an int, but got {class_name(exponent)}")
        if exponent < 0:
            return self._apply(gmpy2.div_2exp, self.mpfr, -exponent, rounding=rounding)
        return self._apply(gmpy2.mul_2exp, self.mpfr, exponent, rounding=rounding)

    def mul_2exp(self, exponent: int, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (self * 2**exponent, ternary); exponent may be negative."""
        return self._pure(MPFloat.mul_2exp_inplace, exponent, rounding)

    def div_2exp_inplace(self, exponent: int, rounding: RoundingMode | str | None = None) -> Ternary:
        check_non_negative(exponent, "exponent")
        return self._apply(gmpy2.div_2exp, self.mpfr, exponent, rounding=rounding)

    def div_2exp(self, exponent: int, rounding: RoundingMode | str | None = None) -> tuple[Self, Ternary]:
        """Return (self / 2**exponent, ternary) for a non-negative exponent."""
        return self._pure(MPFloat.div_2exp_inplace, exponent, rounding)

    def assign_rsub(self, scalar: Any, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        """Overwrite with scalar - other at this value's precision."""
        return self._apply(gmpy2.sub, as_number(scalar), as_number(other), rounding=rounding)

    def assign_rdiv(self, scalar: Any, other: Any, rounding: RoundingMode | str | None = None) -> Ternary:
        """Overwrite with scalar / other at this value's precision."""
        return self._apply(gmpy2.div, as_number(scalar), as_number(other), rounding=rounding)

    # Comparison -----------------------------------------------------------------------------------------------------

    def compare(self, other: Any) -> int:
        """Return -1, 0 or 1 comparing self with other; 0 if either side is NaN."""
        a, b = self.mpfr, as_number(other)
        if a.is_nan() or gmpy2.is_nan(b):
            return 0
        return (a > b) - (a < b)

    def equals_to_bits(self, other: "MPFloat", bits: int) -> bool:
        """
        True if both values have the same sign and exponent and their first bits mantissa bits agree.

        NaN equals nothing. Zeros equal only zeros, infinities only the same infinity.
        """
        check_non_negative(bits, "bits")
        a, b = self.mpfr, as_number(other)
        if not isinstance(b, gmpy2.mpfr):
            b = round_to(b, self.precision, RoundingMode.NEAREST).number
        if a.is_nan() or b.is_nan():
            return False
        if not (a.is_regular() and b.is_regular()):
            return a == b
        if a.is_signed() != b.is_signed():
            return False
        exp_a, mant_a = gmpy2.frexp(a)
        exp_b, mant_b = gmpy2.frexp(b)
        if exp_a != exp_b:
            return False
        scale = 2 ** bits
        return floor(abs(Fraction(*mant_a.as_integer_ratio())) * scale) == \
            floor(abs(Fraction(*mant_b.as_integer_ratio())) * scale)

    def __eq__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.mpfr == as_number(other)

    def __lt__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.mpfr < as_number(other)

    def __le__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.mpfr <= as_number(other)

    def __gt__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.mpfr > as_number(other)

    def __ge__(self, other: Any) -> bool:
        if not _is_operand(other):
            return NotImplemented
        return self.mpfr >= as_number(other)

    # Operators ------------------------------------------------------------------------------------------------------

    def __add__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.add(other)[0]

    def __radd__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.add(other)[0]

    def __sub__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.sub(other)[0]

    def __rsub__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return rsub(other, self)[0]

    def __mul__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.mul(other)[0]

    def __rmul__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.mul(other)[0]

    def __truediv__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.div(other)[0]

    def __rtruediv__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return rdiv(other, self)[0]

    def __pow__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        return self.pow(other)[0]

    def __rpow__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        result = self._detached()
        result._apply(pow, as_number(other), self.mpfr)
        return result

    def __neg__(self) -> Self:
        return self.neg()[0]

    def __pos__(self) -> Self:
        return type(self)(self)

    def __abs__(self) -> Self:
        return self.absolute()[0]

    def __iadd__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        self.add_inplace(other)
        return self

    def __isub__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        self.sub_inplace(other)
        return self

    def __imul__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        self.mul_inplace(other)
        return self

    def __itruediv__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        self.div_inplace(other)
        return self

    def __ipow__(self, other: Any) -> Self:
        if not _is_operand(other):
            return NotImplemented
        self.pow_inplace(other)
        return self


# Methods --------------------------------------------------------------------------------------------------------------

def rsub(scalar: Any, value: MPFloat, rounding: RoundingMode | str | None = None) -> tuple[MPFloat, Ternary]:
    """
    Return (scalar - value, ternary) at value's precision.

    Example:
        >>> rsub(1, MPFloat(0.25))[0]
        MPFloat('0.75', precision=53)
    """
    return value._pure(MPFloat.assign_rsub, scalar, value, rounding)


def rdiv(scalar: Any, value: MPFloat, rounding: RoundingMode | str | None = None) -> tuple[MPFloat, Ternary]:
    """Return (scalar / value, ternary) at value's precision."""
    return value._pure(MPFloat.assign_rdiv, scalar, value, rounding)


# Private Methods ------------------------------------------------------------------------------------------------------

def _is_operand(value: Any) -> bool:
    return isinstance(value, (MPFloat,) + SCALAR_TYPES)
