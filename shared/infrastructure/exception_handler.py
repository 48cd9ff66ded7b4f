"""DRF exception handler mapping engine errors to HTTP responses."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.forms.models import model_to_dict  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import (
    DuplicateError,
    InvalidRangeError,
    NotFoundError,
    StorageFailure,
)

logger = logging.getLogger(__name__)


def describe_record(record) -> dict | None:
    if record is None:
        return None
    if hasattr(record, "_meta"):
        return {"id": record.pk, **model_to_dict(record)}
    return {"value": str(record)}


def inventory_exception_handler(exc, context):  # type: ignore
    """Structured responses for NotFound, Duplicate, invalid input and storage failures."""
    if isinstance(exc, NotFoundError):
        return Response(
            {"detail": str(exc), "kind": exc.kind, "id": str(exc.identifier)},
            status=status.HTTP_404_NOT_FOUND,
        )
    if isinstance(exc, DuplicateError):
        return Response(
            {
                "detail": str(exc),
                "field": exc.field,
                "value": exc.value,
                "existing": describe_record(exc.existing),
            },
            status=status.HTTP_409_CONFLICT,
        )
    if isinstance(exc, StorageFailure):
        logger.error(f"Storage failure while handling {context.get('view')}: {exc}")
        return Response(
            {"detail": "Storage is temporarily unavailable."},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
        return Response(detail, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, InvalidRangeError):
        return Response(
            {"detail": str(exc), "reason": "invalid_range"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, ValueError):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    return exception_handler(exc, context)
