"""
Copy-on-write storage shared by MPFloat handles.

A StorageCell holds a precision and the engine number. Any number of MPFloat handles may reference
the same cell; a handle that is about to change its value first calls make_unique(), which moves it
to a private clone whenever another live handle still references the cell.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import weakref
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import check_precision


# Classes --------------------------------------------------------------------------------------------------------------

class StorageCell:
    """
    Owning holder of {precision, number} tracking its live owners.

    Owners are tracked weakly, keyed by identity: an owner that is garbage collected stops counting
    without any explicit release. Numbers stored are gmpy2 mpfr instances, which are themselves
    immutable, so a clone may start out referencing the same number object.

    Attributes:
        precision (int)     : Precision in bits, fixed for the lifetime of the cell
        number (gmpy2.mpfr) : Current value
    """

    __slots__ = ("precision", "number", "_owners")

    def __init__(self, precision: int, number: Any):
        self.precision = check_precision(precision)
        self.number = number
        self._owners: weakref.WeakValueDictionary = weakref.WeakValueDictionary()

    def __repr__(self) -> str:
        return f"StorageCell(precision={self.precision}, number={self.number!r}, owners={self.owner_count})"

    @property
    def owner_count(self) -> int:
        """Number of live handles referencing this cell."""
        return len(self._owners)

    def attach(self, owner: Any) -> "StorageCell":
        """Register owner as a live handle of this cell and return the cell."""
        self._owners[id(owner)] = owner
        return self

    def detach(self, owner: Any) -> None:
        """Stop tracking owner; detaching an owner that is not attached does nothing."""
        self._owners.pop(id(owner), None)

    def is_unique_to(self, owner: Any) -> bool:
        """True if owner is the only live handle referencing this cell."""
        return len(self._owners) == 1 and self._owners.get(id(owner)) is owner

    def clone_for(self, owner: Any) -> "StorageCell":
        """Return a new cell with the same precision and value, attached to owner only."""
        return StorageCell(self.precision, self.number).attach(owner)


# Methods --------------------------------------------------------------------------------------------------------------

def make_unique(owner: Any) -> StorageCell:
    """
    Ensure owner holds its storage cell exclusively, cloning the cell if it is shared.

    The owner must expose its cell as the `_cell` attribute. Returns the (possibly new) cell;
    calling it again on an already unique cell is a no-op.
    """
    cell = owner._cell
    if cell.is_unique_to(owner):
        return cell
    cell.detach(owner)
    owner._cell = cell.clone_for(owner)
    return owner._cell
