"""
Availability Ledger

Owns the unavailability set of every bookable unit. All writes to one
unit happen inside ``exclusive(unit_id)``: the unit's key lock is taken,
then a transaction is opened and the unit row is read with
SELECT FOR UPDATE. Different units never wait for each other.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Callable, Iterable, Iterator, List, Sequence, Tuple, Union

from apps.availability.domain.calendar import SOURCE_MANUAL, UnitCalendar
from apps.availability.repositories import CalendarRepository
from apps.catalog.services import coerce_pk
from shared.application.locks import KeyedLock, unit_key
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidRangeError
from shared.domain.value_objects import DateRange, parse_date

logger = logging.getLogger(__name__)

RangeLike = Union[DateRange, Tuple[Any, Any], Sequence[Any]]


class AvailabilityLedger:
    """Per-unit calendar of unavailable ranges."""

    def __init__(
        self,
        repository: CalendarRepository,
        uow_factory: Callable[[], DjangoUnitOfWork],
        locks: KeyedLock,
        max_nights: int = 365,
    ):
        self.repository = repository
        self.uow_factory = uow_factory
        self.locks = locks
        self.max_nights = max_nights

    def to_range(self, value: RangeLike) -> DateRange:
        """
        Validate a requested range

        Raises:
            InvalidRangeError: malformed dates, start >= end, or longer than max_nights
        """
        if isinstance(value, DateRange):
            dates = value
        else:
            try:
                start, end = value
            except (TypeError, ValueError):
                raise InvalidRangeError(f"Expected a (start_date, end_date) pair, got {value!r}")
            dates = DateRange.parse(start, end)

        if self.max_nights and len(dates) > self.max_nights:
            raise InvalidRangeError(
                f"Range {dates} spans {len(dates)} nights; at most {self.max_nights} are allowed"
            )
        return dates

    @contextmanager
    def exclusive(self, unit_id) -> Iterator[UnitCalendar]:
        """
        Locked calendar of one unit for a check-then-act sequence

        New entries are saved and events collected when the block exits
        normally; any exception rolls the whole block back.

        Raises:
            NotFoundError: If the unit does not exist
        """
        pk = coerce_pk(unit_id, "BookableUnit")
        with self.locks.hold(unit_key(pk)):
            with self.uow_factory() as uow:
                calendar = self.repository.get_by_unit_id(pk, lock=True)
                yield calendar
                self.repository.save(calendar)
                uow.collect_events(calendar)

    def mark_unavailable(
        self,
        unit_id,
        dates: RangeLike,
        *,
        source: str = SOURCE_MANUAL,
        reference: str = '',
    ) -> bool:
        """
        Add a range to the unit's unavailability set

        Returns False when the exact range was already present.

        Raises:
            NotFoundError: If the unit does not exist
            InvalidRangeError: If the range is malformed
        """
        dates = self.to_range(dates)
        with self.exclusive(unit_id) as calendar:
            _, created = calendar.block(dates, source=source, reference=reference)

        if created:
            logger.info(f"Marked {dates} unavailable on unit {unit_id} ({source})")
        else:
            logger.debug(f"Range {dates} already unavailable on unit {unit_id}")
        return created

    def mark_unavailable_dates(
        self,
        unit_id,
        dates: Iterable[Any],
        *,
        source: str = SOURCE_MANUAL,
        reference: str = '',
    ) -> int:
        """
        Mark discrete nights unavailable, each night d as [d, d + 1)

        Returns the number of nights newly added.
        """
        nights = sorted({parse_date(d, 'dates') for d in dates})
        added = 0
        with self.exclusive(unit_id) as calendar:
            for night in nights:
                _, created = calendar.block(DateRange(night, night + timedelta(days=1)), source, reference)
                added += int(created)

        logger.info(f"Marked {added} of {len(nights)} night(s) unavailable on unit {unit_id}")
        return added

    def calendar(self, unit_id) -> UnitCalendar:
        """Unlocked snapshot of a unit's calendar"""
        return self.repository.get_by_unit_id(unit_id)

    def is_available(self, unit_id, dates: RangeLike) -> bool:
        """True iff the range overlaps no entry of the unit's set"""
        return self.calendar(unit_id).can_allocate(self.to_range(dates))

    def unavailable_ranges(self, unit_id) -> List[DateRange]:
        """Stored entries ordered by start date"""
        return self.calendar(unit_id).ranges()

    def coalesced_ranges(self, unit_id) -> List[DateRange]:
        """The set as disjoint ranges, for calendar display"""
        return self.calendar(unit_id).coalesced()
