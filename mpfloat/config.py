"""
Process-wide defaults for new values and for operations called without an explicit rounding mode.

The defaults live in one module-level global, replaced (never mutated) by the setters. They are read at
call time: values already created keep their precision when the defaults change. The global is not
guarded by a lock; code running on several threads should pass precision and rounding explicitly
instead of flipping the defaults.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .rounding import RoundingMode
from .utils import check_precision, class_name


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class FloatDefaults:
    """
    Snapshot of the process-wide defaults.

    Attributes:
        precision (int)          : Precision in bits of values created without an explicit precision
        rounding (RoundingMode)  : Rounding mode of operations called with rounding=None
    """
    precision: int = 53
    rounding: RoundingMode = RoundingMode.NEAREST

    def __post_init__(self):
        check_precision(self.precision)
        if not isinstance(self.rounding, RoundingMode):
            raise TypeError(f"FloatDefaults.rounding must be a RoundingMode, got {class_name(self.rounding)}")


_defaults = FloatDefaults()


# Methods --------------------------------------------------------------------------------------------------------------

def get_defaults() -> FloatDefaults:
    """Return the current defaults as an immutable snapshot."""
    return _defaults


def get_default_precision() -> int:
    return _defaults.precision


def set_default_precision(precision: int) -> None:
    """
    Set the precision used by values created without an explicit precision.

    Raises:
        TypeError: If precision is not an int.
        ValueError: If precision is out of the supported range.
    """
    global _defaults
    _defaults = replace(_defaults, precision=check_precision(precision))


def get_default_rounding() -> RoundingMode:
    return _defaults.rounding


def set_default_rounding(rounding: RoundingMode | str) -> None:
    """
    Set the rounding mode used by operations called with rounding=None.

    Raises:
        TypeError: If rounding is neither a RoundingMode nor a str.
        ValueError: If rounding is a str naming no mode.
    """
    global _defaults
    _defaults = replace(_defaults, rounding=_as_rounding(rounding))


@contextmanager
def local_defaults(precision: int | None = None, rounding: RoundingMode | str | None = None) -> Iterator[FloatDefaults]:
    """
    Temporarily override the defaults, restoring the previous snapshot on exit.

    Example:
        >>> with local_defaults(precision=200):
        ...     x = MPFloat(1) / 3
        >>> x.precision
        200
    """
    global _defaults
    saved = _defaults
    updated = saved
    if precision is not None:
        updated = replace(updated, precision=check_precision(precision))
    if rounding is not None:
        updated = replace(updated, rounding=_as_rounding(rounding))
    _defaults = updated
    try:
        yield updated
    finally:
        _defaults = saved


def resolve_precision(precision: int | None) -> int:
    """Return precision validated, or the default precision when None."""
    if precision is None:
        return _defaults.precision
    return check_precision(precision)


def resolve_rounding(rounding: RoundingMode | str | None) -> RoundingMode:
    """Return rounding as a RoundingMode, or the default rounding mode when None."""
    if rounding is None:
        return _defaults.rounding
    return _as_rounding(rounding)


# Private Methods ------------------------------------------------------------------------------------------------------

def _as_rounding(rounding: Any) -> RoundingMode:
    if isinstance(rounding, RoundingMode):
        return rounding
    if isinstance(rounding, str):
        try:
            return RoundingMode(rounding)
        except ValueError:
            raise ValueError(f"unknown rounding mode: {rounding!r}") from None
    raise TypeError(f"rounding must be a RoundingMode or str, but got {class_name(rounding)}")
