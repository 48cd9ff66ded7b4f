"""Integration tests for the availability API endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.engine import get_engine
from apps.availability.models import UnavailableRange


class UnitAvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        engine = get_engine()
        self.hotel = engine.create_parent({"name": "Kazakhstan", "registration_no": "HTL-500"})
        self.room = engine.create_child(self.hotel.pk, {"name": "Standard", "units": ["301", "302"]})
        self.unit, self.other_unit = self.room.units.order_by("id")

    def _url(self, name: str, unit_id=None) -> str:
        return reverse(name, kwargs={"pk": unit_id or self.unit.pk})

    def _reserve(self, start: str, end: str, unit_id=None):
        return self.client.post(
            self._url("unit-reservations", unit_id),
            {"start_date": start, "end_date": end, "reference": "BK-42"},
            format="json",
        )

    def test_reservation_is_accepted(self) -> None:
        response = self._reserve("2024-12-01", "2024-12-03")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "accepted")
        entry = UnavailableRange.objects.get(pk=response.data["entry_id"])
        self.assertEqual(entry.reference, "BK-42")

    def test_overlapping_reservation_is_a_conflict(self) -> None:
        self._reserve("2024-12-01", "2024-12-03")
        response = self._reserve("2024-12-02", "2024-12-04")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["reason"], "overlap")
        self.assertEqual(
            response.data["conflicts"],
            [{"start_date": "2024-12-01", "end_date": "2024-12-03"}],
        )

    def test_adjacent_reservation_is_accepted(self) -> None:
        self._reserve("2024-12-01", "2024-12-03")
        response = self._reserve("2024-12-03", "2024-12-05")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_invalid_range_is_a_bad_request(self) -> None:
        response = self._reserve("2024-12-05", "2024-12-01")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["reason"], "invalid_range")

    def test_reservation_on_missing_unit(self) -> None:
        response = self._reserve("2024-12-01", "2024-12-02", unit_id=999999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["kind"], "BookableUnit")

    def test_calendar_lists_entries_and_coalesced_ranges(self) -> None:
        self._reserve("2024-12-01", "2024-12-03")
        self._reserve("2024-12-03", "2024-12-04")

        response = self.client.get(self._url("unit-detail"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["unit"]["label"], "301")
        self.assertEqual(len(response.data["unavailable_ranges"]), 2)
        self.assertEqual(
            response.data["coalesced_ranges"],
            [{"start_date": "2024-12-01", "end_date": "2024-12-04", "nights": 3}],
        )

    def test_mark_unavailable_range_is_idempotent(self) -> None:
        url = self._url("unit-unavailable-ranges")
        payload = {"start_date": "2024-12-10", "end_date": "2024-12-12"}
        first = self.client.post(url, payload, format="json")
        second = self.client.post(url, payload, format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)
        self.assertEqual(second.status_code, status.HTTP_200_OK, second.data)
        self.assertFalse(second.data["created"])
        self.assertEqual(UnavailableRange.objects.filter(unit=self.unit).count(), 1)

    def test_mark_unavailable_dates(self) -> None:
        url = self._url("unit-unavailable-dates")
        response = self.client.post(url, {"dates": ["2024-12-24", "2024-12-25", "2024-12-31"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["added"], 3)
        self.assertEqual(len(response.data["coalesced_ranges"]), 2)

        response = self.client.post(url, {"dates": ["24/12/2024"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_check_availability(self) -> None:
        self._reserve("2024-12-01", "2024-12-03")
        url = self._url("unit-check")

        response = self.client.get(url, {"start_date": "2024-12-02", "end_date": "2024-12-05"})
        self.assertFalse(response.data["available"])

        response = self.client.get(url, {"start_date": "2024-12-03", "end_date": "2024-12-05"})
        self.assertTrue(response.data["available"])

        response = self.client.get(self._url("unit-check", self.other_unit.pk), {"start_date": "2024-12-01", "end_date": "2024-12-03"})
        self.assertTrue(response.data["available"])

        response = self.client.get(url, {"start_date": "2024-12-03"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AvailableUnitsSearchAPITests(APITestCase):
    def setUp(self) -> None:
        engine = get_engine()
        train = engine.create_parent({"kind": "train", "name": "Tulpar", "registration_no": "TRN-500"})
        route = engine.create_child(train.pk, {
            "name": "Almaty - Shymkent",
            "origin": "Almaty",
            "destination": "Shymkent",
            "units": ["Coupe", "Lux"],
        })
        self.coupe, self.lux = route.units.order_by("id")
        engine.reserve(self.coupe.pk, "2024-12-01", "2024-12-02")

    def test_search_returns_free_units_on_route(self) -> None:
        params = {"from": "Almaty", "to": "Shymkent", "start_date": "2024-12-01", "end_date": "2024-12-02"}
        response = self.client.get(reverse("unit-search"), params)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([u["id"] for u in response.data], [self.lux.pk])

    def test_search_with_bad_dates(self) -> None:
        params = {"from": "Almaty", "to": "Shymkent", "start_date": "2024-12-02", "end_date": "2024-12-01"}
        response = self.client.get(reverse("unit-search"), params)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
