"""
Argument validation helpers shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2

# Constants ------------------------------------------------------------------------------------------------------------

# Precision 1 asks the engine for an "exact" conversion, so the usable floor is 2 bits
PRECISION_MIN = 2
PRECISION_MAX = gmpy2.get_max_precision()

BASE_MIN = 2
BASE_MAX = 62


# Methods --------------------------------------------------------------------------------------------------------------

def class_name(obj: Any, fully_qualified: bool = False) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself, so both `class_name(10)` and
    `class_name(int)` return 'int'. Builtins are never module-qualified.

    Examples:
        >>> class_name(2.5)
        'float'
        >>> class_name(MPFloat, fully_qualified=True)
        'mpfloat.value.MPFloat'
    """
    cls = obj if isinstance(obj, type) else obj.__class__
    if fully_qualified and cls.__module__ != "builtins":
        return cls.__module__ + "." + cls.__qualname__
    return cls.__name__


def check_precision(precision: Any) -> int:
    """
    Validate a precision in bits.

    Raises:
        TypeError: If precision is not an int.
        ValueError: If precision is outside PRECISION_MIN..PRECISION_MAX.
    """
    if not isinstance(precision, int) or isinstance(precision, bool):
        raise TypeError(f"precision must be an int, but got {class_name(precision)}")
    if not PRECISION_MIN <= precision <= PRECISION_MAX:
        raise ValueError(f"precision must be in range {PRECISION_MIN}..{PRECISION_MAX}, but got {precision}")
    return precision


def check_base(base: Any) -> int:
    """
    Validate a numeral base for output.

    Raises:
        TypeError: If base is not an int.
        ValueError: If base is outside BASE_MIN..BASE_MAX.
    """
    if not isinstance(base, int) or isinstance(base, bool):
        raise TypeError(f"base must be an int, but got {class_name(base)}")
    if not BASE_MIN <= base <= BASE_MAX:
        raise ValueError(f"base must be in range {BASE_MIN}..{BASE_MAX}, but got {base}")
    return base


def check_non_negative(value: Any, name: str) -> int:
    """Validate a non-negative int argument such as a digit count or a shift."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, but got {class_name(value)}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, but got {value}")
    return value
