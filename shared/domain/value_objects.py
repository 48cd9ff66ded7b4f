"""
Common Value Objects

Value objects used across the catalog and availability domains:
- DateRange: Half-open range of calendar dates (check-in to check-out)
- Route: Ordered pair of route endpoint labels (from -> to)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, List

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRangeError


def parse_date(value, field_name: str = 'date') -> date:
    """
    Coerce an ISO-8601 calendar date (YYYY-MM-DD) into a date

    Datetimes and strings with a time component are rejected: the engine
    works on calendar dates only.
    """
    if isinstance(value, date) and not hasattr(value, 'hour'):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidRangeError(f"{field_name} must be an ISO-8601 date (YYYY-MM-DD), got {value!r}")


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for reservations, unavailability entries and availability checks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if not isinstance(self.start_date, date) or not isinstance(self.end_date, date):
            raise InvalidRangeError("Start and end must be calendar dates")
        if self.start_date >= self.end_date:
            raise InvalidRangeError(
                f"Start date ({self.start_date}) must be before end date ({self.end_date})"
            )

    @classmethod
    def parse(cls, start, end) -> 'DateRange':
        """Build a range from two ISO date strings (or date objects)"""
        return cls(parse_date(start, 'start_date'), parse_date(end, 'end_date'))

    @classmethod
    def single_day(cls, day: date) -> 'DateRange':
        """The one-night range [day, day + 1)"""
        return cls(day, day + timedelta(days=1))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share any dates.
        Note: end_date is exclusive, so adjacent ranges don't overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # start1 < end2 AND start2 < end1
        return (self.start_date < other.end_date and
                other.start_date < self.end_date)

    def touches(self, other: 'DateRange') -> bool:
        """Overlapping or directly adjacent (used when coalescing)"""
        return (self.start_date <= other.end_date and
                other.start_date <= self.end_date)

    def contains(self, check_date: date) -> bool:
        """
        Check if a date is within this range

        Note: start_date is inclusive, end_date is exclusive
        """
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Iterate over the nights covered by the range"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights in this range"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"[{self.start_date.isoformat()}, {self.end_date.isoformat()})"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


def coalesce(ranges: Iterable[DateRange]) -> List[DateRange]:
    """Merge overlapping and adjacent ranges into a sorted list of disjoint ranges"""
    merged: List[DateRange] = []
    for current in sorted(ranges, key=lambda r: (r.start_date, r.end_date)):
        if merged and merged[-1].touches(current):
            last = merged[-1]
            merged[-1] = DateRange(last.start_date, max(last.end_date, current.end_date))
        else:
            merged.append(current)
    return merged


@dataclass(frozen=True)
class Route(ValueObject):
    """
    Route value object

    Endpoint labels are opaque and case-sensitive; route lookups
    match both endpoints exactly.
    """
    origin: str
    destination: str

    def __post_init__(self):
        if not self.origin or not self.destination:
            raise ValueError("Route needs both an origin and a destination")

    def reversed(self) -> 'Route':
        return Route(self.destination, self.origin)

    def __str__(self):
        return f"{self.origin} -> {self.destination}"
