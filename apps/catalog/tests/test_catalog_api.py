"""Integration tests for the catalog API endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.engine import get_engine
from apps.catalog.models import Offering, Resource


class ResourceAPITests(APITestCase):
    def setUp(self) -> None:
        self.list_url = reverse("resource-list")
        self.hotel = get_engine().create_parent({
            "kind": "hotel",
            "name": "Rixos Borovoe",
            "registration_no": "HTL-100",
            "city": "Burabay",
        })

    def test_register_resource(self) -> None:
        payload = {"kind": "train", "name": "Talgo 001", "registration_no": "TRN-001", "attributes": {"cars": 12}}
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["child_ids"], [])
        self.assertEqual(response.data["attributes"], {"cars": 12})

    def test_duplicate_registration_returns_existing_record(self) -> None:
        payload = {"name": "Copy", "registration_no": "HTL-100"}
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["field"], "registration_no")
        self.assertEqual(response.data["existing"]["id"], self.hotel.pk)
        self.assertEqual(Resource.objects.filter(registration_no="HTL-100").count(), 1)

    def test_register_requires_name(self) -> None:
        response = self.client.post(self.list_url, {"registration_no": "X-1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("name", response.data)

    def test_retrieve_missing_resource(self) -> None:
        for missing in ("999999", "abc"):
            response = self.client.get(reverse("resource-detail", kwargs={"pk": missing}))
            self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
            self.assertEqual(response.data["kind"], "Resource")
            self.assertEqual(response.data["id"], missing)

    def test_list_filters_and_limit(self) -> None:
        get_engine().create_parent({"kind": "train", "name": "Talgo", "registration_no": "TRN-002"})
        get_engine().create_parent({"name": "Second", "registration_no": "HTL-101"})

        response = self.client.get(self.list_url, {"kind": "hotel"})
        self.assertEqual([r["registration_no"] for r in response.data], ["HTL-100", "HTL-101"])

        response = self.client.get(self.list_url, {"limit": 1})
        self.assertEqual(len(response.data), 1)

        response = self.client.get(self.list_url, {"limit": "lots"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_partial_update(self) -> None:
        url = reverse("resource-detail", kwargs={"pk": self.hotel.pk})
        response = self.client.patch(url, {"city": "Shchuchinsk"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["city"], "Shchuchinsk")
        self.assertEqual(response.data["registration_no"], "HTL-100")

    def test_search_by_name(self) -> None:
        url = reverse("resource-search")
        response = self.client.get(url, {"name": "Rixos"})
        self.assertEqual(response.data, [])

        response = self.client.get(url, {"name": "Rixos", "prefix": "true"})
        self.assertEqual([r["id"] for r in response.data], [self.hotel.pk])

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_first_resources(self) -> None:
        for n in range(6):
            get_engine().create_parent({"name": f"Hotel {n}", "registration_no": f"HTL-2{n}"})

        response = self.client.get(reverse("resource-first"))
        self.assertEqual(len(response.data), get_engine().default_list_limit)
        self.assertEqual(response.data[0]["id"], self.hotel.pk)

    def test_create_offering_under_resource(self) -> None:
        url = reverse("resource-offerings", kwargs={"pk": self.hotel.pk})
        payload = {"name": "Lake view", "price": "80000.00", "units": [{"label": "201"}, {"label": "202"}]}
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["kind"], Offering.Kind.ROOM)
        self.assertEqual([u["label"] for u in response.data["units"]], ["201", "202"])
        self.hotel.refresh_from_db()
        self.assertEqual(self.hotel.child_ids, [response.data["id"]])

    def test_create_offering_under_missing_resource(self) -> None:
        url = reverse("resource-offerings", kwargs={"pk": 999999})
        response = self.client.post(url, {"name": "Orphan"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertFalse(Offering.objects.exists())


class OfferingAPITests(APITestCase):
    def setUp(self) -> None:
        engine = get_engine()
        self.train = engine.create_parent({"kind": "train", "name": "Talgo", "registration_no": "TRN-010"})
        self.hotel = engine.create_parent({"kind": "hotel", "name": "Hilton", "registration_no": "HTL-010"})
        self.route = engine.create_child(self.train.pk, {
            "name": "Almaty - Astana",
            "origin": "Almaty",
            "destination": "Astana",
            "price": "15000",
            "units": ["2A"],
        })
        self.room = engine.create_child(self.hotel.pk, {"name": "King", "price": "60000"})

    def test_list_filters_and_ordering(self) -> None:
        response = self.client.get(reverse("offering-list"), {"parent": self.hotel.pk})
        self.assertEqual([o["id"] for o in response.data], [self.room.pk])

        response = self.client.get(reverse("offering-list"), {"ordering": "-price"})
        self.assertEqual([o["id"] for o in response.data], [self.room.pk, self.route.pk])

    def test_route_search_is_exact(self) -> None:
        url = reverse("offering-routes")
        response = self.client.get(url, {"from": "Almaty", "to": "Astana"})
        self.assertEqual([o["id"] for o in response.data], [self.route.pk])

        response = self.client.get(url, {"from": "Astana", "to": "Almaty"})
        self.assertEqual(response.data, [])

        response = self.client.get(url, {"from": "almaty", "to": "Astana"})
        self.assertEqual(response.data, [])

    def test_route_offering_needs_destination(self) -> None:
        url = reverse("resource-offerings", kwargs={"pk": self.train.pk})
        response = self.client.post(url, {"name": "Broken", "origin": "Almaty"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_partial_update(self) -> None:
        url = reverse("offering-detail", kwargs={"pk": self.room.pk})
        response = self.client.patch(url, {"price": "65000.00", "service_class": "king"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["price"], "65000.00")
        self.assertEqual(response.data["parent_id"], self.hotel.pk)

    def test_delete_detaches_from_parent(self) -> None:
        url = reverse("offering-detail", kwargs={"pk": self.room.pk})
        response = self.client.delete(f"{url}?parent={self.hotel.pk}")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.hotel.refresh_from_db()
        self.assertEqual(self.hotel.child_ids, [])

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_unit(self) -> None:
        url = reverse("offering-units", kwargs={"pk": self.route.pk})
        response = self.client.post(url, {"label": "3A", "service_date": "2024-12-01"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["offering"], self.route.pk)

        response = self.client.post(url, {"label": "3A", "service_date": "2024-12-01"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["field"], "label")
