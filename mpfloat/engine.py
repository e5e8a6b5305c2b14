"""
Glue between MPFloat and the gmpy2 engine.

All engine calls go through evaluate(), which runs the call under a gmpy2 context set to the target
precision and rounding mode, then collects the result, its ternary and the exception flags raised.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Iterator

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2

# Local ----------------------------------------------------------------------------------------------------------------
from .errors import EngineFlag
from .rounding import RoundingMode, Ternary
from .utils import PRECISION_MIN, class_name

# Constants ------------------------------------------------------------------------------------------------------------

_ROUNDING = {
    RoundingMode.NEAREST: gmpy2.RoundToNearest,
    RoundingMode.TOWARD_ZERO: gmpy2.RoundToZero,
    RoundingMode.TOWARD_POSITIVE_INFINITY: gmpy2.RoundUp,
    RoundingMode.TOWARD_NEGATIVE_INFINITY: gmpy2.RoundDown,
    RoundingMode.AWAY_FROM_ZERO: gmpy2.RoundAwayZero,
    # A correctly rounded result is always faithful
    RoundingMode.FAITHFUL: gmpy2.RoundToNearest,
}

# Rounding characters of the gmpy2 format mini-language
ROUNDING_CHARS = {
    RoundingMode.NEAREST: "N",
    RoundingMode.TOWARD_ZERO: "Z",
    RoundingMode.TOWARD_POSITIVE_INFINITY: "U",
    RoundingMode.TOWARD_NEGATIVE_INFINITY: "D",
    RoundingMode.AWAY_FROM_ZERO: "Y",
    RoundingMode.FAITHFUL: "N",
}


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Outcome:
    """
    Result of one engine call.

    Attributes:
        number (gmpy2.mpfr) : The rounded result
        ternary (Ternary)   : Sign of (number - exact result)
        flags (EngineFlag)  : Exception flags raised during the call
    """
    number: Any
    ternary: Ternary
    flags: EngineFlag = EngineFlag.NONE


# Methods --------------------------------------------------------------------------------------------------------------

@contextmanager
def engine_context(precision: int, rounding: RoundingMode) -> Iterator[Any]:
    """
    Run a block under a gmpy2 context with the given precision and rounding, flags cleared.

    The context is thread-local to gmpy2, so concurrent blocks never see each other's settings.
    """
    with gmpy2.context(precision=precision, round=_ROUNDING[rounding]):
        ctx = gmpy2.get_context()
        ctx.clear_flags()
        yield ctx


def flags_of(ctx: Any) -> EngineFlag:
    """Collect the exception flags currently raised in a gmpy2 context."""
    flags = EngineFlag.NONE
    if ctx.underflow:
        flags |= EngineFlag.UNDERFLOW
    if ctx.overflow:
        flags |= EngineFlag.OVERFLOW
    if ctx.invalid:
        flags |= EngineFlag.NAN
    if ctx.erange:
        flags |= EngineFlag.RANGE_ERROR
    if ctx.divzero:
        flags |= EngineFlag.DIVIDE_BY_ZERO
    return flags


def evaluate(fn: Callable[..., Any], *args: Any, precision: int, rounding: RoundingMode) -> Outcome:
    """
    Call fn(*args) under engine_context() and wrap the mpfr it returns.

    Example:
        >>> evaluate(gmpy2.div, gmpy2.mpfr(1), 3, precision=10, rounding=RoundingMode.NEAREST).ternary
        <Ternary.ABOVE: 1>
    """
    with engine_context(precision, rounding) as ctx:
        number = fn(*args)
        flags = flags_of(ctx)
    return Outcome(number, Ternary.of(number.rc), flags)


def evaluate_pair(fn: Callable[..., Any], *args: Any, precision: int,
                  rounding: RoundingMode) -> tuple[Outcome, Outcome]:
    """Like evaluate() for engine calls returning two results, e.g. gmpy2.sin_cos()."""
    with engine_context(precision, rounding) as ctx:
        first, second = fn(*args)
        flags = flags_of(ctx)
    return Outcome(first, Ternary.of(first.rc), flags), Outcome(second, Ternary.of(second.rc), flags)


def round_to(number: Any, precision: int, rounding: RoundingMode) -> Outcome:
    """
    Round an engine number to precision.

    Converting an mpfr to an equal or wider precision is always exact; gmpy2 may hand back the
    very same object in that case, with a result code left over from whatever produced it.
    """
    if isinstance(number, gmpy2.mpfr) and number.precision <= precision:
        with engine_context(precision, rounding):
            widened = gmpy2.mpfr(number, precision)
        return Outcome(widened, Ternary.EXACT)
    return evaluate(gmpy2.mpfr, number, precision, precision=precision, rounding=rounding)


def to_number(value: Any) -> Any:
    """
    Convert a Python or gmpy2 scalar to a gmpy2 number holding exactly the same value.

    Integers and floats become mpfr wide enough to be exact, rationals become mpq.

    Raises:
        TypeError: If value is not a supported scalar.
    """
    if isinstance(value, gmpy2.mpfr) or isinstance(value, gmpy2.mpq):
        return value
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, (int, gmpy2.mpz)):
        value = int(value)
        return gmpy2.mpfr(value, max(value.bit_length(), PRECISION_MIN))
    if isinstance(value, float):
        return gmpy2.mpfr(value, 53)
    if isinstance(value, Fraction):
        return gmpy2.mpq(value.numerator, value.denominator)
    if isinstance(value, Decimal):
        if value.is_nan():
            return gmpy2.mpfr("nan", 53)
        if value.is_infinite():
            return gmpy2.mpfr(float(value), 53)
        if value.is_zero():
            return gmpy2.mpfr(-0.0 if value.is_signed() else 0.0, PRECISION_MIN)
        ratio = Fraction(value)
        return gmpy2.mpq(ratio.numerator, ratio.denominator)
    raise TypeError(f"unsupported operand type: {class_name(value)}")
