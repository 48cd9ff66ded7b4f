"""
Conflict Resolver

Gatekeeper between a reservation request and the ledger. The
availability check and the write happen inside one exclusive section
of the unit, so two concurrent requests for the same unit can never
both see it free.

No retries here: the result is deterministic for the current ledger
state and retry policy belongs to the caller.
"""

from __future__ import annotations

import logging

from apps.availability.domain.reservations import (
    Accepted,
    Rejected,
    RejectionReason,
    ReservationResult,
)
from apps.availability.ledger import AvailabilityLedger, RangeLike
from shared.domain.exceptions import InvalidRangeError

logger = logging.getLogger(__name__)


class ConflictResolver:
    def __init__(self, ledger: AvailabilityLedger):
        self.ledger = ledger

    def try_reserve(self, unit_id, dates: RangeLike, reference: str = '') -> ReservationResult:
        """
        Reserve a range on a unit if nothing overlaps it

        Returns:
            Accepted, or Rejected(OVERLAP | INVALID_RANGE)
            (INVALID_RANGE also covers a dated seat outside the range)

        Raises:
            NotFoundError: If the unit does not exist
        """
        try:
            requested = self.ledger.to_range(dates)
        except InvalidRangeError as e:
            logger.warning(f"Rejected reservation on unit {unit_id}: {e}")
            return Rejected(unit_id=unit_id, reason=RejectionReason.INVALID_RANGE, detail=str(e))

        with self.ledger.exclusive(unit_id) as calendar:
            in_domain = calendar.serves(requested)
            conflicts = calendar.conflicts_with(requested)
            if conflicts or not in_domain:
                blackout = None
            else:
                blackout = calendar.reserve(requested, reference)

        if not in_domain:
            detail = f"Unit {calendar.id} is only sold for {calendar.service_date}, which {requested} does not include"
            logger.warning(f"Rejected reservation on unit {calendar.id}: {detail}")
            return Rejected(
                unit_id=calendar.id,
                reason=RejectionReason.INVALID_RANGE,
                detail=detail,
                dates=requested,
            )

        if blackout is None:
            logger.warning(
                f"Rejected reservation {requested} on unit {calendar.id}: "
                f"overlaps {', '.join(str(c) for c in conflicts)}"
            )
            return Rejected(
                unit_id=calendar.id,
                reason=RejectionReason.OVERLAP,
                detail=f"Requested range {requested} overlaps {len(conflicts)} unavailable range(s)",
                dates=requested,
                conflicts=tuple(conflicts),
            )

        logger.info(f"Reserved {requested} on unit {calendar.id} (entry {blackout.id})")
        return Accepted(unit_id=calendar.id, dates=requested, entry_id=blackout.id)
