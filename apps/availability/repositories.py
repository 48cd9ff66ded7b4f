"""Calendar repository: maps UnavailableRange rows to the UnitCalendar aggregate."""

from __future__ import annotations

import logging

from apps.availability.domain.calendar import Blackout, UnitCalendar
from apps.availability.models import UnavailableRange
from apps.catalog.models import BookableUnit
from apps.catalog.services import coerce_pk
from shared.domain.exceptions import NotFoundError
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


class CalendarRepository:
    """Loads and stores unit calendars on one database alias."""

    def __init__(self, using: str = "default"):
        self.using = using

    def get_by_unit_id(self, unit_id, lock: bool = False) -> UnitCalendar:
        """
        Load the calendar of a unit

        With lock=True the unit row is read with SELECT FOR UPDATE; must be
        called inside a transaction.

        Raises:
            NotFoundError: If the unit does not exist
        """
        pk = coerce_pk(unit_id, "BookableUnit")
        units = BookableUnit.objects.using(self.using).filter(pk=pk)
        if lock:
            units = units.select_for_update()
        unit = units.first()
        if unit is None:
            raise NotFoundError("BookableUnit", unit_id)

        rows = UnavailableRange.objects.using(self.using).filter(unit_id=pk).order_by("start_date", "end_date")
        blackouts = [
            Blackout(
                id=row.pk,
                dates=DateRange(row.start_date, row.end_date),
                source=row.source,
                reference=row.reference,
            )
            for row in rows
        ]
        return UnitCalendar(id=pk, blackouts=blackouts, service_date=unit.service_date)

    def save(self, calendar: UnitCalendar) -> None:
        """Insert the calendar's new entries; an identical stored range is reused."""
        for blackout in calendar.pending:
            row, created = UnavailableRange.objects.using(self.using).get_or_create(
                unit_id=calendar.id,
                start_date=blackout.dates.start_date,
                end_date=blackout.dates.end_date,
                defaults={"source": blackout.source, "reference": blackout.reference},
            )
            if not created:
                logger.debug(f"Range {blackout.dates} already stored for unit {calendar.id}")
            blackout.id = row.pk
