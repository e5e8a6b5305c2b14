"""
Positional text rendering of MPFloat values in any base from 2 to 62.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .config import resolve_rounding
from .engine import engine_context
from .rounding import RoundingMode
from .utils import check_base, check_non_negative

# Constants ------------------------------------------------------------------------------------------------------------

# Tokens recognized by the parser in every base
NAN_TOKEN = "@NaN@"
INF_TOKEN = "@Inf@"


# Methods --------------------------------------------------------------------------------------------------------------

def to_string(value: Any, base: int = 10, digits: int = 0, rounding: RoundingMode | str | None = None) -> str:
    """
    Render value as a positional numeral without exponent.

    Args:
        value: MPFloat to render.
        base: Numeral base, 2..62. Digits above 9 are 'a'..'z' up to base 36, then 'A'..'Z' for 10..35
            and 'a'..'z' for 36..61.
        digits: Number of significant digits; 0 selects enough digits to read the value back
            unchanged at its precision.
        rounding: Rounding mode applied when digits cut the value short; None for the default.

    Returns:
        The numeral, e.g. '3.25', '-0.000101', '1100' or one of the special tokens
        '@NaN@', '@Inf@', '-@Inf@'. Zeros render as '0' and '-0'. Trailing zero digits
        after the radix point are dropped.

    Raises:
        TypeError: If base or digits is not an int.
        ValueError: If base is out of range or digits is negative.

    Examples:
        >>> to_string(MPFloat(255.5), base=16)
        'ff.8'
        >>> to_string(MPFloat(0.25), base=2)
        '0.01'
        >>> to_string(MPFloat(-100))
        '-100'
    """
    check_base(base)
    check_non_negative(digits, "digits")
    mode = resolve_rounding(rounding)

    number = value.mpfr
    negative = value.signbit
    if number.is_nan():
        return NAN_TOKEN
    if number.is_infinite():
        return "-" + INF_TOKEN if negative else INF_TOKEN
    if number.is_zero():
        return "-0" if negative else "0"

    with engine_context(value.precision, mode):
        mantissa, exp, _ = number.digits(base, digits)

    mantissa = mantissa.lstrip("-").rstrip("0") or "0"
    return ("-" if negative else "") + _place_radix_point(mantissa, exp)


# Private Methods ------------------------------------------------------------------------------------------------------

def _place_radix_point(mantissa: str, exp: int) -> str:
    """Lay out 0.<mantissa> * base**exp positionally."""
    if exp == 0:
        return "0." + mantissa
    if exp > 0:
        if exp >= len(mantissa):
            return mantissa + "0" * (exp - len(mantissa))
        return mantissa[:exp] + "." + mantissa[exp:]
    return "0." + "0" * (-exp) + mantissa
