"""
Reservation Requests and Results

A reservation request either comes back Accepted or Rejected. Rejection
is an expected outcome, returned as a value and never raised, so callers
can render "not available" differently from a system error.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple, Union

from shared.domain.value_objects import DateRange


class RejectionReason(Enum):
    OVERLAP = 'overlap'              # Requested range intersects an unavailable range
    INVALID_RANGE = 'invalid_range'  # start >= end, malformed or out-of-domain dates


@dataclass(frozen=True)
class Accepted:
    unit_id: int
    dates: DateRange
    entry_id: int
    accepted: bool = field(default=True, init=False)

    def to_dict(self) -> dict:
        return {
            'status': 'accepted',
            'unit_id': self.unit_id,
            'start_date': self.dates.start_date.isoformat(),
            'end_date': self.dates.end_date.isoformat(),
            'entry_id': self.entry_id,
        }


@dataclass(frozen=True)
class Rejected:
    unit_id: Any
    reason: RejectionReason
    detail: str = ''
    dates: Union[DateRange, None] = None
    conflicts: Tuple[DateRange, ...] = ()
    accepted: bool = field(default=False, init=False)

    def to_dict(self) -> dict:
        return {
            'status': 'rejected',
            'unit_id': self.unit_id,
            'reason': self.reason.value,
            'detail': self.detail,
            'start_date': self.dates.start_date.isoformat() if self.dates else None,
            'end_date': self.dates.end_date.isoformat() if self.dates else None,
            'conflicts': [
                {'start_date': c.start_date.isoformat(), 'end_date': c.end_date.isoformat()}
                for c in self.conflicts
            ],
        }


ReservationResult = Union[Accepted, Rejected]
