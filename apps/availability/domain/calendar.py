"""
Unit Calendar Aggregate

This is the CRITICAL aggregate for preventing double bookings.
All writes to a unit's unavailability set go through it.

The calendar is the consistency boundary for one bookable unit: it
holds every unavailable range of the unit and answers overlap questions
with half-open interval arithmetic. Entries are a set, not a log:
adding a range that is already present is a no-op.

Strategy:
1. Domain validation: conflicts_with() finds overlapping entries
2. Per-unit key lock + SELECT FOR UPDATE around load/check/save
3. Database unique constraint on (unit, start_date, end_date)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from apps.availability.domain.events import RangeMarkedUnavailable, ReservationAccepted
from shared.domain.base import Aggregate
from shared.domain.value_objects import DateRange, coalesce

SOURCE_RESERVATION = 'reservation'
SOURCE_MANUAL = 'manual'


@dataclass
class Blackout:
    """
    Blackout entity - one entry of the unavailability set

    ``id`` is None until the repository has stored it.
    """
    dates: DateRange
    source: str = SOURCE_MANUAL
    reference: str = ''
    id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.dates, DateRange):
            raise ValueError("Blackout must have a DateRange")

    @property
    def is_new(self) -> bool:
        return self.id is None


@dataclass(eq=False)
class UnitCalendar(Aggregate):
    """
    Unit Calendar Aggregate Root

    Key invariants:
    - The same range is never stored twice for a unit
    - A range accepted through reserve() overlaps no other entry
    - Entries are only removed by an explicit release (not offered yet)

    Usage (inside the ledger's exclusive section):
        calendar = calendar_repo.get_by_unit_id(unit_id, lock=True)
        if calendar.can_allocate(dates):
            calendar.reserve(dates, reference)
            calendar_repo.save(calendar)
    """

    blackouts: List[Blackout] = field(default_factory=list)
    # Seats are sold for one travel date; rooms have none
    service_date: Optional[date] = None

    @property
    def unit_id(self):
        return self.id

    def serves(self, dates: DateRange) -> bool:
        """True iff the range includes the unit's service date (always for undated units)"""
        return self.service_date is None or dates.contains(self.service_date)

    def find(self, dates: DateRange) -> Optional[Blackout]:
        """The entry with exactly these dates, if any"""
        return next((b for b in self.blackouts if b.dates == dates), None)

    def conflicts_with(self, dates: DateRange) -> List[DateRange]:
        """Entries overlapping the requested range, ordered by start date"""
        return sorted(
            {b.dates for b in self.blackouts if b.dates.overlaps_with(dates)},
            key=lambda r: (r.start_date, r.end_date),
        )

    def can_allocate(self, dates: DateRange) -> bool:
        """
        True iff no entry overlaps the requested range

        Adjacent ranges ([1, 3) and [3, 5)) do not overlap.
        """
        return not any(b.dates.overlaps_with(dates) for b in self.blackouts)

    def block(self, dates: DateRange, source: str = SOURCE_MANUAL, reference: str = '') -> Tuple[Blackout, bool]:
        """
        Add a range to the unavailability set

        Idempotent on exact duplicates: returns the stored entry and
        False instead of adding a second one. Overlapping but different
        ranges are kept as separate entries; the set is their union.
        """
        existing = self.find(dates)
        if existing is not None:
            return existing, False

        blackout = Blackout(dates=dates, source=source, reference=reference)
        self.blackouts.append(blackout)
        self.add_event(RangeMarkedUnavailable(
            aggregate_id=self.id,
            unit_id=self.id,
            dates=dates,
            source=source,
        ))
        return blackout, True

    def reserve(self, dates: DateRange, reference: str = '') -> Blackout:
        """
        Reserve a range for a caller

        Raises:
            ValueError: If the range overlaps an existing entry
        """
        conflicts = self.conflicts_with(dates)
        if conflicts:
            raise ValueError(
                f"Dates {dates} are not available for unit {self.id}. "
                f"Overlaps with {', '.join(str(c) for c in conflicts)}"
            )

        blackout, _ = self.block(dates, source=SOURCE_RESERVATION, reference=reference)
        self.add_event(ReservationAccepted(
            aggregate_id=self.id,
            unit_id=self.id,
            dates=dates,
            reference=reference,
        ))
        return blackout

    def ranges(self) -> List[DateRange]:
        """Snapshot of the stored entries, ordered by start date"""
        return sorted(
            (b.dates for b in self.blackouts),
            key=lambda r: (r.start_date, r.end_date),
        )

    def coalesced(self) -> List[DateRange]:
        """The unavailability set as disjoint ranges (overlapping/adjacent entries merged)"""
        return coalesce(b.dates for b in self.blackouts)

    @property
    def pending(self) -> List[Blackout]:
        """Entries not yet written by the repository"""
        return [b for b in self.blackouts if b.is_new]

    def __str__(self):
        return f"UnitCalendar(unit={self.id}, entries={len(self.blackouts)})"

    def __repr__(self):
        return f"UnitCalendar(id={self.id}, entries_count={len(self.blackouts)})"
