"""
Elementary functions, integer rounding and constants for MPFloat.

MathMixin is inherited by MPFloat. Every function computes at the receiver's precision and returns
(result, ternary); the ones with an _inplace twin overwrite the receiver instead.

Partial functions (exp, logarithms, inverse hyperbolic functions) raise DomainError when the engine
flags the argument as outside the function's domain, and then leave the receiver untouched.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import secrets
from typing import Any, Callable, Self

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2

# Local ----------------------------------------------------------------------------------------------------------------
from .config import resolve_precision, resolve_rounding
from .engine import engine_context, evaluate, evaluate_pair, to_number
from .errors import raise_for_flags
from .rounding import RoundingMode, Ternary, combine_ternary
from .storage import make_unique
from .utils import class_name

Rounding = RoundingMode | str | None


# Classes --------------------------------------------------------------------------------------------------------------

class MathMixin:
    """
    Function surface of MPFloat.

    Relies on the host class for mpfr, precision, _apply(), _pure() and _wrap().
    """

    __slots__ = ()

    # Roots and powers -----------------------------------------------------------------------------------------------

    def sqrt_inplace(self, rounding: Rounding = None) -> Ternary:
        return self._apply(gmpy2.sqrt, self.mpfr, rounding=rounding)

    def sqrt(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Square root; NaN for negative values, -0 for -0."""
        return self._pure(MathMixin.sqrt_inplace, rounding)

    @classmethod
    def sqrt_of(cls, n: int, precision: int | None = None, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """
        Square root of an integer at the given precision.

        Example:
            >>> MPFloat.sqrt_of(16)
            (MPFloat('4', precision=53), <Ternary.EXACT: 0>)
        """
        if not isinstance(n, int) or isinstance(n, bool):
            raise TypeError(f"n must be an int, but got {class_name(n)}")
        prec = resolve_precision(precision)
        outcome = evaluate(gmpy2.sqrt, to_number(n), precision=prec, rounding=resolve_rounding(rounding))
        return cls._wrap(outcome.number, prec), outcome.ternary

    def pow_inplace(self, exponent: Any, rounding: Rounding = None) -> Ternary:
        return self._apply(pow, self.mpfr, as_number(exponent), rounding=rounding)

    def pow(self, exponent: Any, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """self ** exponent; exponent may be an integer or any other operand."""
        return self._pure(MathMixin.pow_inplace, exponent, rounding)

    # Checked functions ----------------------------------------------------------------------------------------------

    def _checked(self, fn: Callable[[Any], Any], operation: str, rounding: Rounding) -> tuple[Self, Ternary]:
        outcome = evaluate(fn, self.mpfr, precision=self.precision, rounding=resolve_rounding(rounding))
        raise_for_flags(outcome.flags, operation)
        return self._wrap(outcome.number, self.precision), outcome.ternary

    def exp(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """
        e ** self.

        Raises:
            DomainError: On overflow, underflow or a NaN argument.
        """
        return self._checked(gmpy2.exp, "exp", rounding)

    def log(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """
        Natural logarithm.

        Raises:
            DomainError: is_nan for negative values (and NaN), is_divide_by_zero for zeros.

        Examples:
            >>> MPFloat(1).log()
            (MPFloat('0', precision=53), <Ternary.EXACT: 0>)
            >>> MPFloat(0).log()
            Traceback (most recent call last):
            ...
            mpfloat.errors.DomainError: log: domain error (DIVIDE_BY_ZERO)
        """
        return self._checked(gmpy2.log, "log", rounding)

    def log2(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._checked(gmpy2.log2, "log2", rounding)

    def log10(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._checked(gmpy2.log10, "log10", rounding)

    def asinh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._checked(gmpy2.asinh, "asinh", rounding)

    def acosh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Inverse hyperbolic cosine; raises DomainError (is_nan) below 1."""
        return self._checked(gmpy2.acosh, "acosh", rounding)

    def atanh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Inverse hyperbolic tangent; raises DomainError, is_divide_by_zero at +-1, is_nan beyond."""
        return self._checked(gmpy2.atanh, "atanh", rounding)

    # Unchecked functions --------------------------------------------------------------------------------------------

    def _unary_inplace(self, fn: Callable[[Any], Any], rounding: Rounding) -> Ternary:
        return self._apply(fn, self.mpfr, rounding=rounding)

    def _unary(self, fn: Callable[[Any], Any], rounding: Rounding) -> tuple[Self, Ternary]:
        return self._pure(MathMixin._unary_inplace, fn, rounding)

    def sin(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.sin, rounding)

    def cos(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.cos, rounding)

    def tan(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.tan, rounding)

    def asin(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Arc sine; NaN outside [-1, 1]."""
        return self._unary(gmpy2.asin, rounding)

    def acos(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Arc cosine; NaN outside [-1, 1]."""
        return self._unary(gmpy2.acos, rounding)

    def atan(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.atan, rounding)

    def atan2_inplace(self, x: Any, rounding: Rounding = None) -> Ternary:
        return self._apply(gmpy2.atan2, self.mpfr, as_number(x), rounding=rounding)

    def atan2(self, x: Any, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Angle of the point (x, self), in (-pi, pi]."""
        return self._pure(MathMixin.atan2_inplace, x, rounding)

    def sinh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.sinh, rounding)

    def cosh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.cosh, rounding)

    def tanh(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return self._unary(gmpy2.tanh, rounding)

    def _dual(self, fn: Callable[[Any], Any], rounding: Rounding) -> tuple[Self, Self, int]:
        first, second = evaluate_pair(fn, self.mpfr, precision=self.precision, rounding=resolve_rounding(rounding))
        return (self._wrap(first.number, self.precision), self._wrap(second.number, self.precision),
                combine_ternary(first.ternary, second.ternary))

    def sin_cos(self, rounding: Rounding = None) -> tuple[Self, Self, int]:
        """
        Sine and cosine computed together.

        Returns:
            (sin, cos, code) where code packs both ternaries, see rounding.split_ternary().
        """
        return self._dual(gmpy2.sin_cos, rounding)

    def sinh_cosh(self, rounding: Rounding = None) -> tuple[Self, Self, int]:
        """Hyperbolic sine and cosine computed together, like sin_cos()."""
        return self._dual(gmpy2.sinh_cosh, rounding)

    # Integer rounding -----------------------------------------------------------------------------------------------

    def _integral_inplace(self, fn: Callable[[Any], Any]) -> Ternary:
        """Store fn(self) where fn rounds to an integer in a fixed direction."""
        original = self.mpfr
        with engine_context(self.precision, RoundingMode.NEAREST):
            number = fn(original)
        make_unique(self).number = number
        if number.is_nan():
            return Ternary.EXACT
        return Ternary.of((number > original) - (number < original))

    def floor_inplace(self) -> Ternary:
        return self._integral_inplace(gmpy2.floor)

    def floor(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """
        Largest integer not above self. The result does not depend on rounding, which is accepted
        for symmetry with the other functions.
        """
        return self._pure(MathMixin.floor_inplace)

    def ceil_inplace(self) -> Ternary:
        return self._integral_inplace(gmpy2.ceil)

    def ceil(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Smallest integer not below self, independent of rounding."""
        return self._pure(MathMixin.ceil_inplace)

    def trunc_inplace(self) -> Ternary:
        return self._integral_inplace(gmpy2.trunc)

    def trunc(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Integer part of self, independent of rounding."""
        return self._pure(MathMixin.trunc_inplace)

    def round_inplace(self) -> Ternary:
        return self._integral_inplace(gmpy2.round_away)

    def round(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Nearest integer with ties away from zero, independent of rounding."""
        return self._pure(MathMixin.round_inplace)

    def rint_inplace(self, rounding: Rounding = None) -> Ternary:
        return self._unary_inplace(gmpy2.rint, rounding)

    def rint(self, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Round to an integer in the direction given by rounding."""
        return self._pure(MathMixin.rint_inplace, rounding)

    def __floor__(self) -> int:
        return int(self.floor()[0])

    def __ceil__(self) -> int:
        return int(self.ceil()[0])

    def __trunc__(self) -> int:
        return int(self.trunc()[0])

    # Neighbours -----------------------------------------------------------------------------------------------------

    def min(self, other: Any, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Smaller of self and other; a NaN operand is ignored unless both are NaN."""
        result = self._detached()
        ternary = result._apply(gmpy2.minnum, self.mpfr, as_number(other), rounding=rounding)
        return result, ternary

    def max(self, other: Any, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Larger of self and other; a NaN operand is ignored unless both are NaN."""
        result = self._detached()
        ternary = result._apply(gmpy2.maxnum, self.mpfr, as_number(other), rounding=rounding)
        return result, ternary

    def next_up(self) -> tuple[Self, Ternary]:
        """Next representable value toward +infinity at this precision."""
        result = self._detached()
        result._apply(gmpy2.next_above, self.mpfr, exact=True)
        return result, Ternary.EXACT

    def next_down(self) -> tuple[Self, Ternary]:
        """Next representable value toward -infinity at this precision."""
        result = self._detached()
        result._apply(gmpy2.next_below, self.mpfr, exact=True)
        return result, Ternary.EXACT

    # Constants ------------------------------------------------------------------------------------------------------

    @classmethod
    def _constant(cls, fn: Callable[[], Any], precision: int | None, rounding: Rounding) -> tuple[Self, Ternary]:
        prec = resolve_precision(precision)
        outcome = evaluate(fn, precision=prec, rounding=resolve_rounding(rounding))
        return cls._wrap(outcome.number, prec), outcome.ternary

    @classmethod
    def pi(cls, precision: int | None = None, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """
        The constant pi correctly rounded at precision.

        Safe to call from many threads at once: gmpy2 contexts and the engine's constant caches
        are per thread.
        """
        return cls._constant(gmpy2.const_pi, precision, rounding)

    @classmethod
    def euler(cls, precision: int | None = None, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Euler-Mascheroni constant 0.577..."""
        return cls._constant(gmpy2.const_euler, precision, rounding)

    @classmethod
    def catalan(cls, precision: int | None = None, rounding: Rounding = None) -> tuple[Self, Ternary]:
        return cls._constant(gmpy2.const_catalan, precision, rounding)

    @classmethod
    def ln2(cls, precision: int | None = None, rounding: Rounding = None) -> tuple[Self, Ternary]:
        """Natural logarithm of 2."""
        return cls._constant(gmpy2.const_log2, precision, rounding)

    # Random ---------------------------------------------------------------------------------------------------------

    @classmethod
    def random(cls, state: Any = None, precision: int | None = None) -> Self:
        """
        Uniformly distributed value in [0, 1) from a pseudo-random generator.

        Not suitable for cryptographic use, see secure_random().

        Args:
            state: A gmpy2.random_state(seed); None seeds a fresh state from the OS.
            precision: Precision in bits of the result.
        """
        prec = resolve_precision(precision)
        if state is None:
            state = gmpy2.random_state(secrets.randbits(64))
        with engine_context(prec, RoundingMode.NEAREST):
            number = gmpy2.mpfr_random(state)
        return cls._wrap(number, prec)

    @classmethod
    def secure_random(cls, precision: int | None = None) -> Self:
        """Uniformly distributed value in [0, 1) with every mantissa bit drawn from the OS CSPRNG."""
        prec = resolve_precision(precision)
        with engine_context(prec, RoundingMode.NEAREST):
            number = gmpy2.div_2exp(gmpy2.mpfr(secrets.randbits(prec), prec), prec)
        return cls._wrap(number, prec)


# Methods --------------------------------------------------------------------------------------------------------------

def relative_difference(a: Any, b: Any, rounding: Rounding = None) -> tuple[Any, Ternary]:
    """
    Return (|a - b| / |a|, ternary) at a's precision.

    Example:
        >>> relative_difference(MPFloat(4), MPFloat(3))
        (MPFloat('0.25', precision=53), <Ternary.EXACT: 0>)
    """
    outcome = evaluate(gmpy2.reldiff, a.mpfr, as_number(b), precision=a.precision,
                       rounding=resolve_rounding(rounding))
    number, ternary = outcome.number, outcome.ternary
    if number.is_signed():
        with engine_context(a.precision, RoundingMode.NEAREST):
            number = -number
        ternary = Ternary(-ternary)
    return a._wrap(number, a.precision), ternary


def as_number(value: Any) -> Any:
    """
    Engine number for an MPFloat or scalar operand.

    Raises:
        TypeError: If value is a str or another unsupported type.
    """
    if isinstance(value, MathMixin):
        return value.mpfr
    if isinstance(value, str):
        raise TypeError("string operands are not supported, construct an MPFloat first")
    return to_number(value)
