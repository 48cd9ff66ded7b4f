"""
Availability Domain Events

Events emitted by the UnitCalendar aggregate.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass
class RangeMarkedUnavailable(DomainEvent):
    """
    Event: A range was added to a unit's unavailability set

    Not emitted when the exact range was already present.
    """
    unit_id: Optional[int] = None
    dates: Optional[DateRange] = None
    source: str = ''


@dataclass
class ReservationAccepted(DomainEvent):
    """
    Event: A reservation request passed the conflict check

    Follows the RangeMarkedUnavailable event of the same range.
    """
    unit_id: Optional[int] = None
    dates: Optional[DateRange] = None
    reference: str = ''
