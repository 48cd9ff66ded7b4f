"""URL routing for the availability domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import UnitAvailabilityViewSet

router = DefaultRouter()
router.register(r"units", UnitAvailabilityViewSet, basename="unit")

urlpatterns = [
    path("", include(router.urls)),
]
