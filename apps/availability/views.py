"""Availability API views."""

from __future__ import annotations

import structlog  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.catalog.serializers import BookableUnitSerializer

from .domain.reservations import Accepted, RejectionReason
from .engine import get_engine
from .serializers import (
    AvailableUnitsQuerySerializer,
    DateRangeInputSerializer,
    UnavailableDatesSerializer,
    range_data,
)

logger = structlog.get_logger(__name__)


class UnitAvailabilityViewSet(viewsets.ViewSet):
    """Unavailability calendar and reservations of one bookable unit."""

    permission_classes = [permissions.AllowAny]

    def _calendar_payload(self, engine, unit_id) -> dict:
        unit = engine.get_unit(unit_id)
        return {
            "unit": BookableUnitSerializer(unit).data,
            "unavailable_ranges": [range_data(r) for r in engine.unavailable_ranges(unit.pk)],
            "coalesced_ranges": [range_data(r) for r in engine.coalesced_ranges(unit.pk)],
        }

    def retrieve(self, request, pk=None):  # type: ignore
        return Response(self._calendar_payload(get_engine(), pk))

    @action(detail=True, methods=["post"])
    def reservations(self, request, pk=None):  # type: ignore
        serializer = DateRangeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = get_engine().reserve(pk, data["start_date"], data["end_date"], reference=data["reference"])

        if isinstance(result, Accepted):
            logger.info("availability.reservation_accepted", unit_id=result.unit_id, entry_id=result.entry_id)
            return Response(result.to_dict(), status=status.HTTP_201_CREATED)

        logger.info("availability.reservation_rejected", unit_id=pk, reason=result.reason.value)
        if result.reason is RejectionReason.OVERLAP:
            return Response(result.to_dict(), status=status.HTTP_409_CONFLICT)
        return Response(result.to_dict(), status=status.HTTP_400_BAD_REQUEST)

    @action(detail=True, methods=["post"], url_path="unavailable-ranges")
    def unavailable_ranges(self, request, pk=None):  # type: ignore
        serializer = DateRangeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        engine = get_engine()
        created = engine.mark_unavailable(pk, data["start_date"], data["end_date"], reference=data["reference"])
        payload = {"created": created, **self._calendar_payload(engine, pk)}
        return Response(payload, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="unavailable-dates")
    def unavailable_dates(self, request, pk=None):  # type: ignore
        serializer = UnavailableDatesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        engine = get_engine()
        added = engine.mark_unavailable_dates(
            pk,
            serializer.validated_data["dates"],
            reference=serializer.validated_data["reference"],
        )
        return Response({"added": added, **self._calendar_payload(engine, pk)})

    @action(detail=True, methods=["get"])
    def check(self, request, pk=None):  # type: ignore
        start_date = request.query_params.get("start_date")
        end_date = request.query_params.get("end_date")
        available = get_engine().is_available(pk, start_date, end_date)
        return Response({
            "unit_id": pk,
            "start_date": start_date,
            "end_date": end_date,
            "available": available,
        })

    @action(detail=False, methods=["get"])
    def search(self, request):  # type: ignore
        """Units on an exact route that are free for the whole requested range"""
        query = AvailableUnitsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        units = get_engine().available_units(data["from"], data["to"], data["start_date"], data["end_date"])
        return Response(BookableUnitSerializer(units, many=True).data)
