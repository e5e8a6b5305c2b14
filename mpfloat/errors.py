"""
Domain error classification for partial functions.

Total operations report NaN, infinities and signed zeros in-band. Partial functions (logarithms,
inverse hyperbolic functions, exponential) raise DomainError when the engine signals that the
argument left the function's real domain.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
from enum import IntFlag

logger = logging.getLogger(__name__)


# Enums ----------------------------------------------------------------------------------------------------------------

class EngineFlag(IntFlag):
    """
    Exception flags raised by the engine during a single operation.

    Inexactness is not a flag here, it is reported through the ternary value.
    """
    NONE = 0
    UNDERFLOW = 1
    OVERFLOW = 2
    NAN = 4
    RANGE_ERROR = 8
    DIVIDE_BY_ZERO = 16


# Classes --------------------------------------------------------------------------------------------------------------

class DomainError(ArithmeticError):
    """
    Raised by a partial function whose argument is outside the function's domain.

    The classification is available through the is_* properties, so callers never need to
    match on the message.

    Attributes:
        flags (EngineFlag) : Engine exception flags raised by the failing call
        operation (str)    : Name of the failing operation, e.g. 'log'

    Example:
        >>> try:
        ...     MPFloat(-1).log()
        ... except DomainError as exc:
        ...     exc.is_nan
        True
    """

    def __init__(self, flags: EngineFlag, operation: str = ""):
        self.flags = EngineFlag(flags)
        self.operation = operation
        names = "|".join(f.name for f in EngineFlag if f and f in self.flags) or "NONE"
        where = f"{operation}: " if operation else ""
        super().__init__(f"{where}domain error ({names})")

    @property
    def is_nan(self) -> bool:
        """The argument lies outside the real domain, the exact result is not a number."""
        return EngineFlag.NAN in self.flags

    @property
    def is_divide_by_zero(self) -> bool:
        """The argument sits on a pole, e.g. log(0) or atanh(1)."""
        return EngineFlag.DIVIDE_BY_ZERO in self.flags

    @property
    def is_overflow(self) -> bool:
        return EngineFlag.OVERFLOW in self.flags

    @property
    def is_underflow(self) -> bool:
        return EngineFlag.UNDERFLOW in self.flags

    @property
    def is_range_error(self) -> bool:
        return EngineFlag.RANGE_ERROR in self.flags


# Methods --------------------------------------------------------------------------------------------------------------

def raise_for_flags(flags: EngineFlag, operation: str) -> None:
    """
    Raise DomainError if any engine exception flag is set, otherwise return None.

    Raises:
        DomainError: If flags is non-empty.
    """
    if flags:
        logger.debug("%s raised engine flags %r", operation, flags)
        raise DomainError(flags, operation)
