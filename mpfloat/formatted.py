"""
printf-style formatting of a single MPFloat value.

A format holds exactly one value directive and any literal text:

    %[flags][width][.precision]R[rounding]conversion

    flags       any of '-' (left align), '+' (always sign), ' ' (space for sign), '0' (zero pad)
    rounding    N (nearest), Z (toward zero), U (up), D (down), Y (away from zero);
                absent means the rounding mode passed to the call
    conversion  a A (hex), b (binary), e E (scientific), f F (fixed), g G (shortest)

'%%' is a literal percent sign; any other '%' sequence makes the format invalid.

Reading is intentionally lenient: the engine offers no scanner to drive from a format, so read
functions only reject an empty format and otherwise parse the first whitespace-delimited token.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import re
import sys
from dataclasses import dataclass
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .config import resolve_rounding
from .engine import ROUNDING_CHARS
from .io import STDIN_LOCK, read_record, write_text
from .rounding import RoundingMode
from .value import MPFloat

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

DIRECTIVE = re.compile(
    r"%(?P<flags>[-+ 0]*)(?P<width>\d+)?(?:\.(?P<precision>\d+))?R(?P<rounding>[NZUDY]?)(?P<conversion>[aAbeEfFgG])"
)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Directive:
    """
    A parsed value directive.

    Attributes:
        flags (str)            : Flag characters as written
        width (int)            : Minimum field width, 0 for none
        precision (int | None) : Digits after the point (or significant digits for g), None for default
        rounding (str)         : Rounding character, '' to use the call's rounding mode
        conversion (str)       : Conversion character
        start (int)            : Index of '%' in the format
        end (int)              : Index after the conversion character
    """
    flags: str
    width: int
    precision: int | None
    rounding: str
    conversion: str
    start: int
    end: int

    def render(self, value: MPFloat, rounding: RoundingMode) -> str:
        """Render value for this directive; rounding applies when the directive names none."""
        rounding_char = self.rounding or ROUNDING_CHARS[rounding]
        precision = "" if self.precision is None else f".{self.precision}"
        body = format(value.mpfr, f"{precision}{rounding_char}{self.conversion}")

        if body.startswith("-"):
            sign, body = "-", body[1:]
        elif "+" in self.flags:
            sign = "+"
        elif " " in self.flags:
            sign = " "
        else:
            sign = ""

        pad = self.width - len(sign) - len(body)
        if pad <= 0:
            return sign + body
        if "-" in self.flags:
            return sign + body + " " * pad
        if "0" in self.flags and value.is_finite:
            return sign + "0" * pad + body
        return " " * pad + sign + body


# Methods --------------------------------------------------------------------------------------------------------------

def parse_format(fmt: str) -> Directive | None:
    """
    Find the single value directive of fmt.

    Returns:
        The directive, or None if fmt has no directive, more than one, or a '%' sequence that
        is neither a directive nor '%%'.
    """
    if not isinstance(fmt, str):
        return None
    found = None
    i = 0
    while True:
        i = fmt.find("%", i)
        if i < 0:
            break
        if fmt.startswith("%%", i):
            i += 2
            continue
        match = DIRECTIVE.match(fmt, i)
        if match is None or found is not None:
            logger.debug("invalid format %r at index %d", fmt, i)
            return None
        found = Directive(
            flags=match["flags"],
            width=int(match["width"] or 0),
            precision=None if match["precision"] is None else int(match["precision"]),
            rounding=match["rounding"],
            conversion=match["conversion"],
            start=match.start(),
            end=match.end(),
        )
        i = match.end()
    if found is None:
        logger.debug("format %r has no value directive", fmt)
    return found


def format_value(value: MPFloat, fmt: str, rounding: RoundingMode | str | None = None) -> str | None:
    """
    Render fmt with its directive replaced by value.

    Returns:
        The text, or None if fmt is invalid.

    Examples:
        >>> format_value(MPFloat(3.14159), "pi=%.2Rf")
        'pi=3.14'
        >>> format_value(MPFloat(2.5), "[%-6.1RZf]%%")
        '[2.5   ]%'
        >>> format_value(MPFloat(1), "%d") is None
        True
    """
    directive = parse_format(fmt)
    if directive is None:
        return None
    mode = resolve_rounding(rounding)
    head = fmt[:directive.start].replace("%%", "%")
    tail = fmt[directive.end:].replace("%%", "%")
    return head + directive.render(value, mode) + tail


def write_formatted(dest: Any, value: MPFloat, fmt: str, rounding: RoundingMode | str | None = None) -> int:
    """
    Write value formatted by fmt to dest (file object or descriptor).

    Returns:
        Number of characters written, or -1 on an invalid format or an unusable destination.
    """
    text = format_value(value, fmt, rounding)
    if text is None:
        return -1
    if write_text(dest, text) < 0:
        return -1
    return len(text)


def print_formatted(value: MPFloat, fmt: str, rounding: RoundingMode | str | None = None) -> int:
    """write_formatted() to standard output."""
    return write_formatted(sys.stdout, value, fmt, rounding)


def read_formatted(source: Any, fmt: str, rounding: RoundingMode | str | None = None) -> MPFloat | None:
    """
    Read one value from source given a format.

    Only an empty format is rejected. The format is not otherwise interpreted: the first
    whitespace-delimited token of the first line is parsed as a base-10 numeral at the default
    precision.

    Returns:
        The value, or None on an empty format, a read failure or an invalid token.
    """
    if not fmt:
        logger.debug("empty format for reading")
        return None
    record = read_record(source)
    if record is None:
        return None
    tokens = record.split()
    if not tokens:
        return None
    return MPFloat.from_string(tokens[0], 10, None, rounding)


def scan_formatted(fmt: str, rounding: RoundingMode | str | None = None) -> MPFloat | None:
    """read_formatted() from standard input, holding the stdin lock."""
    with STDIN_LOCK:
        stream = sys.stdin
        if stream is None:
            return None
        return read_formatted(getattr(stream, "buffer", stream), fmt, rounding)
