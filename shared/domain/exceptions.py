"""
Domain Exceptions

Error taxonomy shared by the catalog and availability engines.
Rejected reservations are NOT exceptions: they are returned as values
(see apps.availability.domain.reservations).
"""

from typing import Any


class InventoryError(Exception):
    """Base class for all inventory engine errors"""


class NotFoundError(InventoryError):
    """
    A referenced parent, child or unit does not exist

    Carries the kind of record and the identifier the caller supplied,
    so the HTTP layer can tell which id failed.
    """

    def __init__(self, kind: str, identifier: Any):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier!r} not found")


class DuplicateError(InventoryError):
    """
    A create operation's identifying key already exists

    The conflicting existing record is attached so the caller can show it.
    """

    def __init__(self, field: str, value: Any, existing: Any):
        self.field = field
        self.value = value
        self.existing = existing
        super().__init__(f"Record with {field}={value!r} already exists")


class InvalidRangeError(InventoryError, ValueError):
    """Malformed date range: unparsable dates, start >= end, or out of domain"""


class StorageFailure(InventoryError):
    """The underlying database could not complete the operation"""
