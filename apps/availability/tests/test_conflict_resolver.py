"""Tests for check-and-reserve through the conflict resolver."""

from __future__ import annotations

import threading
from datetime import date
from itertools import combinations

import pytest
from django.db import connection

from apps.availability.domain.reservations import Accepted, Rejected, RejectionReason
from apps.availability.models import UnavailableRange
from shared.domain.exceptions import NotFoundError
from shared.domain.value_objects import DateRange


def r(start: int, end: int) -> DateRange:
    return DateRange(date(2024, 12, start), date(2024, 12, end))


@pytest.mark.django_db
class TestTryReserve:
    def test_free_range_is_accepted(self, engine, room_unit):
        result = engine.reserve(room_unit.pk, "2024-12-01", "2024-12-03", reference="BK-1")

        assert isinstance(result, Accepted)
        assert result.accepted
        assert result.dates == r(1, 3)
        entry = UnavailableRange.objects.get(pk=result.entry_id)
        assert entry.source == UnavailableRange.Source.RESERVATION
        assert entry.reference == "BK-1"

    def test_overlap_is_rejected_with_the_blocking_ranges(self, engine, room_unit):
        engine.mark_unavailable(room_unit.pk, "2024-12-01", "2024-12-03")
        engine.reserve(room_unit.pk, "2024-12-05", "2024-12-07")

        result = engine.reserve(room_unit.pk, "2024-12-02", "2024-12-06")

        assert isinstance(result, Rejected)
        assert not result.accepted
        assert result.reason is RejectionReason.OVERLAP
        assert result.conflicts == (r(1, 3), r(5, 7))
        assert engine.unavailable_ranges(room_unit.pk) == [r(1, 3), r(5, 7)]

    def test_boundary_adjacency_is_not_overlap(self, engine, room_unit):
        engine.mark_unavailable(room_unit.pk, "2024-12-01", "2024-12-03")

        result = engine.reserve(room_unit.pk, "2024-12-03", "2024-12-05")

        assert isinstance(result, Accepted)
        assert engine.coalesced_ranges(room_unit.pk) == [r(1, 5)]

    @pytest.mark.parametrize(
        "start_date,end_date",
        [
            ("2024-12-03", "2024-12-03"),
            ("2024-12-05", "2024-12-01"),
            ("2024-13-01", "2024-12-02"),
            ("", "2024-12-02"),
            ("2024-12-01", "2025-12-01"),
        ],
    )
    def test_invalid_range_is_rejected_not_raised(self, engine, room_unit, start_date, end_date):
        result = engine.reserve(room_unit.pk, start_date, end_date)

        assert isinstance(result, Rejected)
        assert result.reason is RejectionReason.INVALID_RANGE
        assert result.detail
        assert engine.unavailable_ranges(room_unit.pk) == []

    def test_dated_seat_outside_its_service_date_is_rejected(self, engine, train):
        route = engine.create_child(train.pk, {
            "name": "Almaty - Astana",
            "origin": "Almaty",
            "destination": "Astana",
            "units": [{"label": "2A", "service_date": "2024-12-01"}],
        })
        seat = route.units.get()

        result = engine.reserve(seat.pk, "2025-03-10", "2025-03-11")

        assert isinstance(result, Rejected)
        assert result.reason is RejectionReason.INVALID_RANGE
        assert result.conflicts == ()
        assert engine.unavailable_ranges(seat.pk) == []
        assert isinstance(engine.reserve(seat.pk, "2024-12-01", "2024-12-02"), Accepted)

    def test_missing_unit_raises_not_found(self, engine):
        with pytest.raises(NotFoundError):
            engine.reserve(424242, "2024-12-01", "2024-12-02")

    def test_rejection_serialises_conflicts(self, engine, room_unit):
        engine.reserve(room_unit.pk, "2024-12-01", "2024-12-02")

        payload = engine.reserve(room_unit.pk, "2024-12-01", "2024-12-02").to_dict()

        assert payload["status"] == "rejected"
        assert payload["reason"] == "overlap"
        assert payload["conflicts"] == [{"start_date": "2024-12-01", "end_date": "2024-12-02"}]


@pytest.mark.django_db
def test_no_double_booking_in_either_order(engine, room):
    first, second = room.units.order_by("id")

    for unit, ranges in ((first, [(1, 4), (3, 6)]), (second, [(3, 6), (1, 4)])):
        results = [
            engine.reserve(unit.pk, f"2024-12-{s:02d}", f"2024-12-{e:02d}")
            for s, e in ranges
        ]
        assert [isinstance(result, Accepted) for result in results] == [True, False]


@pytest.mark.django_db
def test_reservation_events_reach_the_bus(engine, room_unit, django_capture_on_commit_callbacks):
    from apps.availability.domain.events import ReservationAccepted

    seen = []
    engine.bus.register_event_handler(ReservationAccepted, lambda event: seen.append(event.dates))

    with django_capture_on_commit_callbacks(execute=True):
        engine.reserve(room_unit.pk, "2024-12-01", "2024-12-02")
        engine.reserve(room_unit.pk, "2024-12-01", "2024-12-02")

    assert seen == [r(1, 2)]


def _race(engine, unit_id, ranges):
    barrier = threading.Barrier(len(ranges))
    results = [None] * len(ranges)

    def attempt(i, start, end):
        try:
            barrier.wait(timeout=5)
            results[i] = engine.reserve(unit_id, start, end)
        finally:
            connection.close()

    threads = [
        threading.Thread(target=attempt, args=(i, start, end))
        for i, (start, end) in enumerate(ranges)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


@pytest.mark.django_db(transaction=True)
def test_concurrent_identical_requests_accept_exactly_one(engine, room_unit):
    results = _race(engine, room_unit.pk, [("2024-12-01", "2024-12-04")] * 8)

    accepted = [res for res in results if isinstance(res, Accepted)]
    rejected = [res for res in results if isinstance(res, Rejected)]
    assert len(accepted) == 1
    assert len(rejected) == 7
    assert all(res.reason is RejectionReason.OVERLAP for res in rejected)
    assert UnavailableRange.objects.filter(unit_id=room_unit.pk).count() == 1


@pytest.mark.django_db(transaction=True)
def test_concurrent_staggered_requests_never_overlap(engine, room_unit):
    ranges = [(f"2024-12-{day:02d}", f"2024-12-{day + 2:02d}") for day in range(1, 11)]

    results = _race(engine, room_unit.pk, ranges)

    accepted = [res.dates for res in results if isinstance(res, Accepted)]
    assert accepted
    assert all(not a.overlaps_with(b) for a, b in combinations(accepted, 2))
    assert sorted(engine.unavailable_ranges(room_unit.pk), key=lambda d: d.start_date) == sorted(
        accepted, key=lambda d: d.start_date
    )
    assert len(engine.locks) == 0
