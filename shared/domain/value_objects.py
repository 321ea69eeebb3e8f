"""
Value objects shared by the booking, chat and rating apps.
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Stay period ``[check_in, check_out)``

    The guest sleeps the nights from ``check_in`` up to, but not
    including, ``check_out``; the check-out day is free for the next
    guest. Empty and reversed periods cannot be built.
    """
    check_in: date
    check_out: date

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise ValueError(
                f"Check-out ({self.check_out}) must be after check-in ({self.check_in})"
            )

    def overlaps_with(self, other: "DateRange") -> bool:
        """True when the two stays share at least one night."""
        if not isinstance(other, DateRange):
            raise TypeError(f"Cannot compare a stay with {type(other).__name__}")
        return self.check_in < other.check_out and other.check_in < self.check_out

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __str__(self):
        return f"{self.check_in.isoformat()}..{self.check_out.isoformat()}"
