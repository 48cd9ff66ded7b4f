"""
Inventory Engine

Facade offered to the HTTP layer and other collaborators. One engine
owns one message bus, one keyed-lock registry and a unit-of-work factory
bound to a database alias, and hands them to its components explicitly.

The process-wide engine is built in AvailabilityConfig.ready() and
reached through get_engine(); tests build their own instances.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, List, Mapping, Optional

from django.apps import apps as django_apps  # type: ignore
from django.conf import settings  # type: ignore

from apps.availability.commands import (
    MarkUnavailableCommand,
    MarkUnavailableDatesCommand,
    ReserveUnitCommand,
)
from apps.availability.domain.reservations import ReservationResult
from apps.availability.ledger import AvailabilityLedger
from apps.availability.repositories import CalendarRepository
from apps.availability.resolver import ConflictResolver
from apps.catalog.commands import (
    AddUnitCommand,
    CreateChildCommand,
    DeleteChildCommand,
    RegisterParentCommand,
    UpdateChildCommand,
    UpdateParentCommand,
)
from apps.catalog.integrity import ReferentialIntegrityCoordinator
from apps.catalog.models import BookableUnit, Offering, Resource
from apps.catalog.queries import QueryRouter
from apps.catalog.services import ResourceCatalog
from shared.application.locks import KeyedLock
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, parse_date

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("apps.audit")

DEFAULTS = {
    "DATABASE_ALIAS": "default",
    "MAX_RESERVATION_NIGHTS": 365,
    "DEFAULT_LIST_LIMIT": 5,
}


def inventory_settings() -> dict:
    return {**DEFAULTS, **getattr(settings, "INVENTORY", {})}


def audit_event(event: DomainEvent) -> None:
    """Default subscriber: one audit line per committed domain event"""
    payload = event.to_dict()
    audit_logger.info(f"{payload['event_type']} aggregate={payload['aggregate_id']}")


class InventoryEngine:
    """Availability and inventory-consistency engine."""

    def __init__(
        self,
        *,
        using: str = "default",
        max_nights: int = 365,
        default_list_limit: int = 5,
        bus: Optional[MessageBus] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self.using = using
        self.default_list_limit = default_list_limit
        self.bus = bus or MessageBus()
        self.locks = locks or KeyedLock()
        self.uow_factory = partial(DjangoUnitOfWork, self.bus, using)

        self.router = QueryRouter(using)
        self.integrity = ReferentialIntegrityCoordinator(self.uow_factory, self.locks, using)
        self.catalog = ResourceCatalog(self.uow_factory, self.locks, self.integrity, self.router, using)
        self.ledger = AvailabilityLedger(
            CalendarRepository(using),
            self.uow_factory,
            self.locks,
            max_nights=max_nights,
        )
        self.resolver = ConflictResolver(self.ledger)

        self._register_handlers()

    @classmethod
    def from_settings(cls) -> "InventoryEngine":
        config = inventory_settings()
        return cls(
            using=config["DATABASE_ALIAS"],
            max_nights=config["MAX_RESERVATION_NIGHTS"],
            default_list_limit=config["DEFAULT_LIST_LIMIT"],
        )

    def _register_handlers(self) -> None:
        bus = self.bus
        bus.register_command_handler(RegisterParentCommand, lambda c: self.catalog.create_parent(c.attrs))
        bus.register_command_handler(UpdateParentCommand, lambda c: self.catalog.update_parent(c.parent_id, c.attrs))
        bus.register_command_handler(CreateChildCommand, lambda c: self.catalog.create_child(c.parent_id, c.attrs))
        bus.register_command_handler(UpdateChildCommand, lambda c: self.catalog.update_child(c.child_id, c.attrs))
        bus.register_command_handler(DeleteChildCommand, lambda c: self.catalog.delete_child(c.child_id, c.parent_id))
        bus.register_command_handler(
            AddUnitCommand,
            lambda c: self.catalog.add_unit(c.child_id, c.label, c.service_date),
        )
        bus.register_command_handler(
            ReserveUnitCommand,
            lambda c: self.resolver.try_reserve(c.unit_id, (c.start_date, c.end_date), c.reference),
        )
        bus.register_command_handler(
            MarkUnavailableCommand,
            lambda c: self.ledger.mark_unavailable(c.unit_id, (c.start_date, c.end_date), reference=c.reference),
        )
        bus.register_command_handler(
            MarkUnavailableDatesCommand,
            lambda c: self.ledger.mark_unavailable_dates(c.unit_id, c.dates, reference=c.reference),
        )
        bus.register_event_handler(DomainEvent, audit_event)

    # ===== External interface =====

    def create_parent(self, attrs: Mapping[str, Any]) -> Resource:
        return self.bus.handle_command(RegisterParentCommand(attrs=dict(attrs)))

    def update_parent(self, parent_id, attrs: Mapping[str, Any]) -> Resource:
        return self.bus.handle_command(UpdateParentCommand(parent_id=parent_id, attrs=dict(attrs)))

    def create_child(self, parent_id, attrs: Mapping[str, Any]) -> Offering:
        return self.bus.handle_command(CreateChildCommand(parent_id=parent_id, attrs=dict(attrs)))

    def update_child(self, child_id, attrs: Mapping[str, Any]) -> Offering:
        return self.bus.handle_command(UpdateChildCommand(child_id=child_id, attrs=dict(attrs)))

    def delete_child(self, child_id, parent_id=None) -> None:
        self.bus.handle_command(DeleteChildCommand(child_id=child_id, parent_id=parent_id))

    def add_unit(self, child_id, label: str, service_date=None) -> BookableUnit:
        return self.bus.handle_command(AddUnitCommand(child_id=child_id, label=label, service_date=service_date))

    def reserve(self, unit_id, start_date, end_date, reference: str = '') -> ReservationResult:
        return self.bus.handle_command(ReserveUnitCommand(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            reference=reference,
        ))

    def mark_unavailable(self, unit_id, start_date, end_date, reference: str = '') -> bool:
        return self.bus.handle_command(MarkUnavailableCommand(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            reference=reference,
        ))

    def mark_unavailable_dates(self, unit_id, dates, reference: str = '') -> int:
        return self.bus.handle_command(MarkUnavailableDatesCommand(
            unit_id=unit_id,
            dates=tuple(dates),
            reference=reference,
        ))

    def query_by_route(self, origin: str, destination: str, on=None) -> List[Offering]:
        day = parse_date(on, "on") if on not in (None, "") else None
        return self.router.find_by_route(origin, destination, on=day)

    def query_by_name(self, key: str, prefix: bool = False, kind: Optional[str] = None) -> List[Resource]:
        return self.router.find_by_name(key, prefix=prefix, kind=kind)

    def available_units(self, origin: str, destination: str, start_date, end_date) -> List[BookableUnit]:
        """
        Units of matching route offerings that are free for the whole range

        A seat tied to a service date is only offered when the range includes it.
        """
        dates = self.ledger.to_range((start_date, end_date))
        offerings = self.router.find_by_route(origin, destination)
        units = BookableUnit.objects.using(self.using).filter(offering__in=offerings).order_by("id")
        return [
            unit for unit in units
            if (unit.service_date is None or dates.contains(unit.service_date))
            and self.ledger.is_available(unit.pk, dates)
        ]

    # ===== Reads =====

    def get_parent(self, parent_id) -> Resource:
        return self.catalog.get_parent(parent_id)

    def list_parents(self, kind: Optional[str] = None, limit: Optional[int] = None):
        return self.catalog.list_parents(kind=kind, limit=limit)

    def first_parents(self, kind: Optional[str] = None, limit: Optional[int] = None):
        """The first N parents in registration order, N defaulting to DEFAULT_LIST_LIMIT"""
        return self.catalog.list_parents(kind=kind, limit=self.default_list_limit if limit is None else limit)

    def get_child(self, child_id) -> Offering:
        return self.catalog.get_child(child_id)

    def get_unit(self, unit_id) -> BookableUnit:
        return self.catalog.get_unit(unit_id)

    def list_children(self, filters=None, ordering=None):
        return self.catalog.list_children(filters, ordering)

    def is_available(self, unit_id, start_date, end_date) -> bool:
        return self.ledger.is_available(unit_id, (start_date, end_date))

    def unavailable_ranges(self, unit_id) -> List[DateRange]:
        return self.ledger.unavailable_ranges(unit_id)

    def coalesced_ranges(self, unit_id) -> List[DateRange]:
        return self.ledger.coalesced_ranges(unit_id)


def get_engine() -> InventoryEngine:
    """The engine built at process startup"""
    return django_apps.get_app_config("availability").engine
