"""
Numeral parsing with base autodetection and partial-match end positions.

The accepted grammar is the one of mpfr_strtofr:

    [whitespace] [+|-] ( @nan@ | @inf@ | nan | nan(chars) | inf | infinity
                       | [0x|0b] significand [exponent] )

    significand  digits of the base with at most one radix point '.', at least one digit
    exponent     e|E (base <= 10) or @ (any base): power of the base
                 p|P (base 2 or 16): power of two
                 followed by an optional sign and at least one decimal digit

'nan' and 'inf' spellings without '@' are recognized only for bases up to 16 (or 0), where their
letters cannot be digits. Matching is case-insensitive except for digits of bases above 36, where
'A'..'Z' stand for 10..35 and 'a'..'z' for 36..61.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import re
from dataclasses import dataclass
from typing import Any

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2

# Local ----------------------------------------------------------------------------------------------------------------
from .config import resolve_precision, resolve_rounding
from .engine import engine_context, round_to
from .rounding import RoundingMode, Ternary
from .utils import BASE_MAX, BASE_MIN, class_name
from .value import MPFloat

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

WHITESPACE = " \t\n\v\f\r"

_SPECIAL_ANY_BASE = (("@nan@", "nan"), ("@inf@", "inf"))
# Longest spelling first
_SPECIAL_LOW_BASE = (("infinity", "inf"), ("inf", "inf"), ("nan", "nan"))
_NAN_PAYLOAD = re.compile(r"\([0-9A-Za-z_]*\)")
_EXPONENT_DIGITS = re.compile(r"[+-]?[0-9]+")


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of a successful parse().

    Attributes:
        value (MPFloat)   : Parsed value at the requested precision
        ternary (Ternary) : Rounding direction of value relative to the exact numeral
        end (int)         : Index of the first character of the input not consumed
    """
    value: MPFloat
    ternary: Ternary
    end: int


# Methods --------------------------------------------------------------------------------------------------------------

def parse(text: str, base: int = 10, precision: int | None = None,
          rounding: RoundingMode | str | None = None) -> ParseResult | None:
    """
    Parse the longest numeral at the start of text.

    Trailing characters do not make the parse fail; ParseResult.end points at the first of them.

    Args:
        text: Input string.
        base: 2..62, or 0 to pick 16 for a '0x' prefix, 2 for '0b', else 10.
        precision: Precision in bits of the result; None for the default.
        rounding: Rounding mode for the conversion; None for the default.

    Returns:
        ParseResult, or None if text is empty, starts with no valid numeral, or base is unsupported.

    Raises:
        TypeError: If text is not a str.

    Examples:
        >>> r = parse("3.14159abc")
        >>> r.end, "3.14159abc"[r.end]
        (7, 'a')
        >>> parse("0xff.8", base=0).value
        MPFloat('255.5', precision=53)
        >>> parse("") is None
        True
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be a str, but got {class_name(text)}")
    if not _is_supported_base(base):
        logger.debug("unsupported base for parsing: %r", base)
        return None

    prec = resolve_precision(precision)
    mode = resolve_rounding(rounding)

    scanned = _scan(text, base)
    if scanned is None:
        return None
    body, resolved_base, end = scanned

    special = body.lstrip("+-")
    if special == "@nan@":
        number, ternary = round_to(gmpy2.nan(), prec, mode).number, Ternary.EXACT
    elif special == "@inf@":
        number, ternary = round_to(gmpy2.inf(-1 if body[0] == "-" else 1), prec, mode).number, Ternary.EXACT
    else:
        with engine_context(prec, mode):
            number = gmpy2.mpfr(body, prec, resolved_base)
        ternary = Ternary.of(number.rc)

    return ParseResult(MPFloat._wrap(number, prec), ternary, end)


# Private Methods ------------------------------------------------------------------------------------------------------

def _is_supported_base(base: Any) -> bool:
    if not isinstance(base, int) or isinstance(base, bool):
        return False
    return base == 0 or BASE_MIN <= base <= BASE_MAX


def _scan(text: str, base: int) -> tuple[str, int, int] | None:
    """
    Find the numeral at the start of text.

    Returns:
        (body, resolved_base, end) where body is the sign, significand and exponent with any base
        prefix removed, or "@nan@" / "@inf@" with an optional sign for special values. None if no
        numeral starts the text.
    """
    n = len(text)
    i = 0
    while i < n and text[i] in WHITESPACE:
        i += 1

    sign = ""
    if i < n and text[i] in "+-":
        sign = text[i]
        i += 1

    special = _scan_special(text, i, base)
    if special is not None:
        kind, end = special
        return sign + "@" + kind + "@", base or 10, end

    resolved = base or 10
    prefix = text[i:i + 2].lower()
    if prefix == "0x" and base in (0, 16) and _scan_significand(text, i + 2, 16) is not None:
        resolved, i = 16, i + 2
    elif prefix == "0b" and base in (0, 2) and _scan_significand(text, i + 2, 2) is not None:
        resolved, i = 2, i + 2

    start = i
    end = _scan_significand(text, i, resolved)
    if end is None:
        return None
    end = _scan_exponent(text, end, resolved)
    return sign + text[start:end], resolved, end


def _scan_special(text: str, i: int, base: int) -> tuple[str, int] | None:
    lowered = text[i:i + 8].lower()
    for spelling, kind in _SPECIAL_ANY_BASE:
        if lowered.startswith(spelling):
            return kind, i + len(spelling)
    if base > 16:
        return None
    for spelling, kind in _SPECIAL_LOW_BASE:
        if lowered.startswith(spelling):
            end = i + len(spelling)
            if kind == "nan":
                payload = _NAN_PAYLOAD.match(text, end)
                if payload:
                    end = payload.end()
            return kind, end
    return None


def _scan_significand(text: str, i: int, base: int) -> int | None:
    """End index of digits with at most one radix point, or None if no digit is found."""
    n = len(text)
    digits = 0
    seen_point = False
    while i < n:
        ch = text[i]
        if ch == "." and not seen_point:
            seen_point = True
        elif _digit_value(ch, base) is not None:
            digits += 1
        else:
            break
        i += 1
    if digits == 0:
        return None
    # A radix point not followed by digits belongs to the significand, e.g. '1.'
    return i


def _scan_exponent(text: str, i: int, base: int) -> int:
    """End index after an exponent starting at i, or i itself when there is none."""
    if i >= len(text):
        return i
    marker = text[i]
    is_marker = (
        marker == "@"
        or (marker in "eE" and base <= 10)
        or (marker in "pP" and base in (2, 16))
    )
    if not is_marker:
        return i
    match = _EXPONENT_DIGITS.match(text, i + 1)
    return match.end() if match else i


def _digit_value(ch: str, base: int) -> int | None:
    if "0" <= ch <= "9":
        value = ord(ch) - ord("0")
    elif "A" <= ch <= "Z":
        value = ord(ch) - ord("A") + 10
    elif "a" <= ch <= "z":
        value = ord(ch) - ord("a") + (36 if base > 36 else 10)
    else:
        return None
    return value if value < base else None
