"""Catalog API views.

Reads go straight to the ORM through DRF filtering; every write is
delegated to the inventory engine so parent/child links stay consistent.
"""

from __future__ import annotations

import structlog  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.availability.engine import get_engine

from .filters import OfferingFilterSet, ResourceFilterSet
from .models import Offering, Resource
from .serializers import (
    BookableUnitSerializer,
    NameQuerySerializer,
    OfferingSerializer,
    OfferingWriteSerializer,
    ResourceSerializer,
    ResourceWriteSerializer,
    RouteQuerySerializer,
    UnitInputSerializer,
)
from .services import CHILD_ORDERINGS

logger = structlog.get_logger(__name__)


def parse_limit(value) -> int | None:
    if value in (None, ""):
        return None
    limit = int(value)
    if limit < 0:
        raise ValueError("limit must be zero or a positive integer")
    return limit


class ResourceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Hotels and trains."""

    queryset = Resource.objects.all()
    serializer_class = ResourceSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_class = ResourceFilterSet

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        limit = parse_limit(request.query_params.get("limit"))
        if limit is not None:
            queryset = queryset[:limit]
        return Response(self.get_serializer(queryset, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):  # type: ignore
        resource = get_engine().get_parent(pk)
        return Response(self.get_serializer(resource).data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ResourceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        resource = get_engine().create_parent(serializer.validated_data)
        logger.info("catalog.resource_registered", resource_id=resource.pk, kind=resource.kind)
        return Response(ResourceSerializer(resource).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None, *args, **kwargs):  # type: ignore
        serializer = ResourceWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        resource = get_engine().update_parent(pk, serializer.validated_data)
        return Response(ResourceSerializer(resource).data)

    @action(detail=False, methods=["get"])
    def search(self, request):  # type: ignore
        query = NameQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        resources = get_engine().query_by_name(
            query.validated_data["name"],
            prefix=query.validated_data["prefix"],
            kind=query.validated_data.get("kind"),
        )
        return Response(ResourceSerializer(resources, many=True).data)

    @action(detail=False, methods=["get"])
    def first(self, request):  # type: ignore
        """The first N registered resources (N defaults to the configured list limit)"""
        resources = get_engine().first_parents(
            kind=request.query_params.get("kind") or None,
            limit=parse_limit(request.query_params.get("limit")),
        )
        return Response(ResourceSerializer(resources, many=True).data)

    @action(detail=True, methods=["post"])
    def offerings(self, request, pk=None):  # type: ignore
        serializer = OfferingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        offering = get_engine().create_child(pk, serializer.validated_data)
        logger.info("catalog.offering_created", offering_id=offering.pk, resource_id=offering.parent_id)
        return Response(OfferingSerializer(offering).data, status=status.HTTP_201_CREATED)


class OfferingViewSet(
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Rooms and route offerings."""

    queryset = Offering.objects.select_related("parent").prefetch_related("units")
    serializer_class = OfferingSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = OfferingFilterSet
    ordering_fields = sorted(CHILD_ORDERINGS)
    ordering = ["id"]

    def retrieve(self, request, pk=None, *args, **kwargs):  # type: ignore
        offering = get_engine().get_child(pk)
        return Response(self.get_serializer(offering).data)

    def partial_update(self, request, pk=None, *args, **kwargs):  # type: ignore
        serializer = OfferingWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        attrs = dict(serializer.validated_data)
        attrs.pop("units", None)
        offering = get_engine().update_child(pk, attrs)
        return Response(OfferingSerializer(offering).data)

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        get_engine().delete_child(pk, parent_id=request.query_params.get("parent"))
        logger.info("catalog.offering_deleted", offering_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def routes(self, request):  # type: ignore
        query = RouteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        offerings = get_engine().query_by_route(
            query.validated_data["from"],
            query.validated_data["to"],
            on=query.validated_data.get("on"),
        )
        return Response(OfferingSerializer(offerings, many=True).data)

    @action(detail=True, methods=["post"])
    def units(self, request, pk=None):  # type: ignore
        serializer = UnitInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        unit = get_engine().add_unit(
            pk,
            serializer.validated_data["label"],
            serializer.validated_data.get("service_date"),
        )
        return Response(BookableUnitSerializer(unit).data, status=status.HTTP_201_CREATED)
