"""
Availability Commands

Typed requests accepted by the availability engine. Dates are ISO-8601
strings or date objects and are validated by the handlers.

Commands:
- ReserveUnitCommand: check-and-reserve a range on a unit
- MarkUnavailableCommand: add a range to a unit's unavailability set
- MarkUnavailableDatesCommand: add discrete nights to the set
"""

from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True)
class ReserveUnitCommand:
    """Reserve [start_date, end_date) on a bookable unit"""
    unit_id: Any
    start_date: Any
    end_date: Any
    reference: str = ''


@dataclass(frozen=True)
class MarkUnavailableCommand:
    """Block [start_date, end_date) on a unit without a conflict check"""
    unit_id: Any
    start_date: Any
    end_date: Any
    reference: str = ''


@dataclass(frozen=True)
class MarkUnavailableDatesCommand:
    """Block each listed night d as [d, d + 1)"""
    unit_id: Any
    dates: Sequence[Any] = ()
    reference: str = ''
