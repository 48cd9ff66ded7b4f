"""URL routing for the catalog domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import OfferingViewSet, ResourceViewSet

router = DefaultRouter()
router.register(r"resources", ResourceViewSet, basename="resource")
router.register(r"offerings", OfferingViewSet, basename="offering")

urlpatterns = [
    path("", include(router.urls)),
]
