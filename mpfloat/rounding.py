"""
Rounding modes and ternary (inexactness) results.

Every operation that may lose precision takes a RoundingMode and reports a Ternary: the sign of
(stored result - exact mathematical result). Operations producing two results at once report both
directions packed into one integer, see combine_ternary() and split_ternary().
"""

# Standard library -----------------------------------------------------------------------------------------------------
from enum import IntEnum, StrEnum, unique


# Enums ----------------------------------------------------------------------------------------------------------------

@unique
class RoundingMode(StrEnum):
    """
    Rounding direction applied when an exact result is not representable at the target precision.

    Attributes:
        NEAREST (str)                  : Round to nearest, ties to even
        TOWARD_ZERO (str)              : Truncate toward zero
        TOWARD_POSITIVE_INFINITY (str) : Round up
        TOWARD_NEGATIVE_INFINITY (str) : Round down
        AWAY_FROM_ZERO (str)           : Round away from zero
        FAITHFUL (str)                 : Either neighbour of the exact value is acceptable
    """
    NEAREST = "nearest"
    TOWARD_ZERO = "toward_zero"
    TOWARD_POSITIVE_INFINITY = "toward_positive_infinity"
    TOWARD_NEGATIVE_INFINITY = "toward_negative_infinity"
    AWAY_FROM_ZERO = "away_from_zero"
    FAITHFUL = "faithful"


@unique
class Ternary(IntEnum):
    """
    Direction of the rounding that produced a stored result.

    Attributes:
        BELOW (int) : Stored result is smaller than the exact value
        EXACT (int) : Stored result equals the exact value
        ABOVE (int) : Stored result is greater than the exact value
    """
    BELOW = -1
    EXACT = 0
    ABOVE = 1

    @classmethod
    def of(cls, code: int) -> "Ternary":
        """
        Normalize an engine result code to a Ternary.

        The engine reports some results with magnitude 2 (e.g. rounding to an integer of a
        non-integral value); only the sign carries meaning here.
        """
        if code > 0:
            return cls.ABOVE
        if code < 0:
            return cls.BELOW
        return cls.EXACT


# Methods --------------------------------------------------------------------------------------------------------------

# Two bits per result: 0 exact, 1 above, 2 below
_ENCODE = {Ternary.EXACT: 0, Ternary.ABOVE: 1, Ternary.BELOW: 2}
_DECODE = {0: Ternary.EXACT, 1: Ternary.ABOVE, 2: Ternary.BELOW}


def combine_ternary(first: int, second: int) -> int:
    """
    Pack the ternaries of a dual-result operation into one integer.

    Each direction is encoded on two bits (0 exact, 1 above, 2 below); the first result occupies the
    low bits, the second result the next two bits. The code is 0 only when both results are exact.

    Args:
        first: Ternary of the first result (e.g. sine in sin_cos).
        second: Ternary of the second result (e.g. cosine in sin_cos).

    Returns:
        Combined code in range 0..10.

    Examples:
        >>> combine_ternary(Ternary.ABOVE, Ternary.BELOW)
        9
        >>> split_ternary(9)
        (<Ternary.ABOVE: 1>, <Ternary.BELOW: -1>)
    """
    return _ENCODE[Ternary.of(first)] | (_ENCODE[Ternary.of(second)] << 2)


def split_ternary(code: int) -> tuple[Ternary, Ternary]:
    """
    Inverse of combine_ternary().

    Raises:
        TypeError: If code is not an int.
        ValueError: If code is not a valid combined code.
    """
    if not isinstance(code, int) or isinstance(code, bool):
        raise TypeError(f"combined ternary must be an int, but got {type(code).__name__}")
    low, high = code & 0b11, code >> 2
    if code < 0 or low not in _DECODE or high not in _DECODE:
        raise ValueError(f"invalid combined ternary: {code}")
    return _DECODE[low], _DECODE[high]
