"""Money value in the ledger's smallest unit (tinybar) with a whole-hbar view."""

from decimal import Decimal
from functools import total_ordering
from typing import Union

TINYBAR_PER_HBAR = 100_000_000
MAX_TINYBAR = 2**63 - 1


@total_ordering
class Hbar:
    """Non-negative amount of hbar, stored as an integral number of tinybar."""

    __slots__ = ("_tinybar",)

    def __init__(self, tinybar: int):
        if isinstance(tinybar, bool) or not isinstance(tinybar, int):
            raise TypeError(f"Tinybar amount must be an int, got {type(tinybar).__name__}.")
        if tinybar < 0 or tinybar > MAX_TINYBAR:
            raise ValueError(f"Tinybar amount {tinybar} is outside [0, {MAX_TINYBAR}].")
        self._tinybar = tinybar

    @classmethod
    def from_tinybar(cls, tinybar: int) -> "Hbar":
        return cls(tinybar)

    @classmethod
    def of(cls, hbar: Union[int, str, Decimal]) -> "Hbar":
        """Build from a whole-hbar amount; fractions must resolve to whole tinybar."""
        if isinstance(hbar, float):
            raise TypeError("Use int, str or Decimal for hbar amounts, not float.")
        tinybar = Decimal(hbar) * TINYBAR_PER_HBAR
        if tinybar != tinybar.to_integral_value():
            raise ValueError(f"{hbar} hbar is not a whole number of tinybar.")
        return cls(int(tinybar))

    @classmethod
    def zero(cls) -> "Hbar":
        return cls(0)

    @classmethod
    def coerce(cls, amount: Union["Hbar", int]) -> "Hbar":
        """Accept an Hbar or a plain int interpreted as tinybar."""
        if isinstance(amount, Hbar):
            return amount
        return cls.from_tinybar(amount)

    def as_tinybar(self) -> int:
        return self._tinybar

    def to_hbar(self) -> Decimal:
        return Decimal(self._tinybar) / TINYBAR_PER_HBAR

    def __eq__(self, other) -> bool:
        if not isinstance(other, Hbar):
            return NotImplemented
        return self._tinybar == other._tinybar

    def __lt__(self, other) -> bool:
        if not isinstance(other, Hbar):
            return NotImplemented
        return self._tinybar < other._tinybar

    def __hash__(self) -> int:
        return hash(self._tinybar)

    def __repr__(self) -> str:
        return f"Hbar.from_tinybar({self._tinybar})"

    def __str__(self) -> str:
        return f"{self.to_hbar().normalize():f} hbar"
