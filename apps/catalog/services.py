"""
Resource Catalog

Create/read/update/delete of parents, children and bookable units.

Every membership change (create or delete of a child) runs as one unit
of work: the offering row and the parent's child list are written in
the same transaction while the parent's key lock is held, so no caller
ever observes a child without its parent reference or the reverse.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from django.db import IntegrityError  # type: ignore
from django.db.models import QuerySet  # type: ignore

from apps.catalog.events import ChildCreated, ChildDeleted, ParentRegistered
from apps.catalog.integrity import ReferentialIntegrityCoordinator
from apps.catalog.models import BookableUnit, Offering, Resource
from apps.catalog.queries import QueryRouter
from shared.application.locks import KeyedLock, parent_key, registration_key
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DuplicateError, NotFoundError
from shared.domain.value_objects import parse_date

logger = logging.getLogger(__name__)

PARENT_FIELDS = {"kind", "name", "registration_no", "city", "description", "attributes"}
CHILD_FIELDS = {
    "kind",
    "name",
    "service_class",
    "origin",
    "destination",
    "departs_on",
    "price",
    "capacity",
    "description",
    "attributes",
}
CHILD_FILTERS = {
    "parent": "parent_id",
    "parent_id": "parent_id",
    "kind": "kind",
    "name": "name",
    "service_class": "service_class",
    "origin": "origin",
    "destination": "destination",
    "departs_on": "departs_on",
}
CHILD_ORDERINGS = {"id", "name", "price", "capacity", "departs_on", "created_at"}

# Hotels hold rooms, trains hold route offerings
CHILD_KIND_FOR_PARENT = {
    Resource.Kind.HOTEL: Offering.Kind.ROOM,
    Resource.Kind.TRAIN: Offering.Kind.ROUTE,
}


def coerce_pk(value: Any, kind: str) -> int:
    """Turn an opaque identifier into a primary key, or report it as not found"""
    if isinstance(value, bool):
        raise NotFoundError(kind, value)
    if isinstance(value, int):
        return value
    text = str(value).strip() if value is not None else ""
    if not (text.isascii() and text.isdigit()):
        raise NotFoundError(kind, value)
    return int(text)


def split_attrs(attrs: Mapping[str, Any], known: set) -> Dict[str, Any]:
    """Known model fields pass through; anything else lands in ``attributes``."""
    fields = {key: value for key, value in attrs.items() if key in known}
    extra = {key: value for key, value in attrs.items() if key not in known}
    if extra:
        fields["attributes"] = {**(fields.get("attributes") or {}), **extra}
    return fields


class ResourceCatalog:
    """Durable record of parents and children, bound to one database alias."""

    def __init__(
        self,
        uow_factory: Callable[[], DjangoUnitOfWork],
        locks: KeyedLock,
        integrity: ReferentialIntegrityCoordinator,
        router: QueryRouter,
        using: str = "default",
    ):
        self.uow_factory = uow_factory
        self.locks = locks
        self.integrity = integrity
        self.router = router
        self.using = using

    # ===== Parents =====

    def create_parent(self, attrs: Mapping[str, Any]) -> Resource:
        """
        Register a hotel or train

        Raises:
            DuplicateError: registration_no already used; carries the existing record
        """
        fields = split_attrs({key: value for key, value in attrs.items() if key != "child_ids"}, PARENT_FIELDS)
        registration_no = str(fields.get("registration_no") or "").strip()
        fields["registration_no"] = registration_no

        with self.locks.hold(registration_key(registration_no)):
            existing = self.router.find_by_registration_no(registration_no)
            if existing is not None:
                logger.warning(
                    f"Rejected duplicate registration {registration_no!r}: "
                    f"already used by resource {existing.pk}"
                )
                raise DuplicateError("registration_no", registration_no, existing)

            resource = Resource(**fields)
            resource.full_clean(validate_unique=False, validate_constraints=False)
            try:
                with self.uow_factory() as uow:
                    resource.save(using=self.using)
                    uow.record(ParentRegistered(
                        aggregate_id=resource.pk,
                        parent_id=resource.pk,
                        kind=resource.kind,
                        registration_no=registration_no,
                    ))
            except IntegrityError:
                # Registered concurrently by another process
                existing = self.router.find_by_registration_no(registration_no)
                if existing is None:
                    raise
                raise DuplicateError("registration_no", registration_no, existing)

        logger.info(f"Registered {resource.kind} {resource.pk} ({registration_no})")
        return resource

    def get_parent(self, parent_id) -> Resource:
        pk = coerce_pk(parent_id, "Resource")
        parent = Resource.objects.using(self.using).filter(pk=pk).first()
        if parent is None:
            raise NotFoundError("Resource", parent_id)
        return parent

    def list_parents(self, kind: Optional[str] = None, limit: Optional[int] = None) -> QuerySet:
        qs = Resource.objects.using(self.using).order_by("id")
        if kind:
            qs = qs.filter(kind=kind)
        if limit is not None:
            qs = qs[: max(int(limit), 0)]
        return qs

    def update_parent(self, parent_id, attrs: Mapping[str, Any]) -> Resource:
        """
        Partial update of descriptive fields

        The kind and the child list cannot be changed here.
        """
        pk = coerce_pk(parent_id, "Resource")
        attrs = {key: value for key, value in attrs.items() if key not in ("kind", "child_ids")}
        fields = split_attrs(attrs, PARENT_FIELDS)
        if "registration_no" in fields:
            fields["registration_no"] = str(fields["registration_no"] or "").strip()
        new_registration = fields.get("registration_no")
        keys = [parent_key(pk)]
        if new_registration:
            keys.append(registration_key(str(new_registration)))

        with self.locks.hold(*keys):
            with self.uow_factory():
                parent = Resource.objects.using(self.using).select_for_update().filter(pk=pk).first()
                if parent is None:
                    raise NotFoundError("Resource", parent_id)

                if new_registration and new_registration != parent.registration_no:
                    existing = self.router.find_by_registration_no(new_registration)
                    if existing is not None:
                        raise DuplicateError("registration_no", new_registration, existing)

                if "attributes" in fields:
                    fields["attributes"] = {**parent.attributes, **fields["attributes"]}
                for name, value in fields.items():
                    setattr(parent, name, value)
                parent.full_clean(validate_unique=False, validate_constraints=False)
                parent.save(using=self.using)

        logger.info(f"Updated resource {pk}: {sorted(fields)}")
        return parent

    # ===== Children =====

    def create_child(self, parent_id, attrs: Mapping[str, Any]) -> Offering:
        """
        Create an offering under a parent and attach it, in one unit of work

        ``attrs`` may carry ``units``: labels (or {"label", "service_date"} dicts)
        of bookable units created together with the offering.

        Raises:
            NotFoundError: If the parent does not exist
        """
        pk = coerce_pk(parent_id, "Resource")
        attrs = dict(attrs)
        units = attrs.pop("units", None) or []
        for key in ("parent", "parent_id"):
            attrs.pop(key, None)
        fields = split_attrs(attrs, CHILD_FIELDS)

        with self.locks.hold(parent_key(pk)):
            with self.uow_factory() as uow:
                parent = Resource.objects.using(self.using).select_for_update().filter(pk=pk).first()
                if parent is None:
                    raise NotFoundError("Resource", parent_id)

                fields.setdefault("kind", CHILD_KIND_FOR_PARENT[parent.kind])
                child = Offering(parent=parent, **fields)
                child.full_clean(validate_unique=False, validate_constraints=False)
                child.save(using=self.using)

                for unit_data in units:
                    self._create_unit(child, unit_data)

                self.integrity.attach(parent.pk, child.pk)
                uow.record(ChildCreated(
                    aggregate_id=child.pk,
                    child_id=child.pk,
                    parent_id=parent.pk,
                    kind=child.kind,
                ))

        logger.info(f"Created offering {child.pk} under resource {pk} with {len(units)} unit(s)")
        return child

    def get_child(self, child_id) -> Offering:
        pk = coerce_pk(child_id, "Offering")
        child = Offering.objects.using(self.using).select_related("parent").filter(pk=pk).first()
        if child is None:
            raise NotFoundError("Offering", child_id)
        return child

    def list_children(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        ordering: Optional[Iterable[str]] = None,
    ) -> QuerySet:
        """
        Offerings matching every given filter, in creation order by default

        Raises:
            ValueError: Unknown filter or ordering field
        """
        qs = Offering.objects.using(self.using).select_related("parent")
        for name, value in (filters or {}).items():
            if name not in CHILD_FILTERS:
                raise ValueError(f"Unknown offering filter: {name}")
            qs = qs.filter(**{CHILD_FILTERS[name]: value})

        order = list(ordering or ["id"])
        for field in order:
            if field.lstrip("-") not in CHILD_ORDERINGS:
                raise ValueError(f"Cannot order offerings by {field}")
        if "id" not in {field.lstrip("-") for field in order}:
            order.append("id")
        return qs.order_by(*order)

    def update_child(self, child_id, attrs: Mapping[str, Any]) -> Offering:
        """Partial update of descriptive fields; parent and kind are fixed."""
        pk = coerce_pk(child_id, "Offering")
        attrs = {key: value for key, value in attrs.items() if key not in ("kind", "parent", "parent_id", "units")}
        fields = split_attrs(attrs, CHILD_FIELDS)

        with self.uow_factory():
            child = Offering.objects.using(self.using).select_for_update().filter(pk=pk).first()
            if child is None:
                raise NotFoundError("Offering", child_id)
            if "attributes" in fields:
                fields["attributes"] = {**child.attributes, **fields["attributes"]}
            for name, value in fields.items():
                setattr(child, name, value)
            child.full_clean(validate_unique=False, validate_constraints=False)
            child.save(using=self.using)

        logger.info(f"Updated offering {pk}: {sorted(fields)}")
        return child

    def delete_child(self, child_id, parent_id=None) -> None:
        """
        Delete an offering and remove it from its parent's child list

        The offering's recorded parent is always detached; a different
        ``parent_id`` supplied by the caller is detached as well. A parent
        that no longer exists is tolerated.

        Raises:
            NotFoundError: If the offering does not exist
        """
        pk = coerce_pk(child_id, "Offering")
        try:
            claimed_parent = coerce_pk(parent_id, "Resource") if parent_id is not None else None
        except NotFoundError:
            claimed_parent = None

        owner = (
            Offering.objects.using(self.using)
            .filter(pk=pk)
            .values_list("parent_id", flat=True)
            .first()
        )
        if owner is None:
            raise NotFoundError("Offering", child_id)

        owners = {owner}
        if claimed_parent is not None and claimed_parent != owner:
            logger.warning(
                f"Offering {pk} belongs to resource {owner}, not {claimed_parent}; detaching from both"
            )
            owners.add(claimed_parent)

        with self.locks.hold(*(parent_key(p) for p in owners)):
            with self.uow_factory() as uow:
                child = Offering.objects.using(self.using).select_for_update().filter(pk=pk).first()
                if child is None:
                    raise NotFoundError("Offering", child_id)

                child.delete(using=self.using)
                for parent in sorted(owners):
                    self.integrity.detach(parent, pk)
                uow.record(ChildDeleted(aggregate_id=pk, child_id=pk, parent_id=owner))

        logger.info(f"Deleted offering {pk} from resource {owner}")

    # ===== Units =====

    def add_unit(self, child_id, label: str, service_date=None) -> BookableUnit:
        """
        Add a bookable unit (room number, seat class on a date) to an offering

        Raises:
            NotFoundError: If the offering does not exist
            DuplicateError: Same label (and service date) already exists
        """
        pk = coerce_pk(child_id, "Offering")
        with self.uow_factory():
            child = Offering.objects.using(self.using).filter(pk=pk).first()
            if child is None:
                raise NotFoundError("Offering", child_id)
            unit = self._create_unit(child, {"label": label, "service_date": service_date})

        logger.info(f"Added unit {unit.pk} ({unit}) to offering {pk}")
        return unit

    def get_unit(self, unit_id) -> BookableUnit:
        pk = coerce_pk(unit_id, "BookableUnit")
        unit = BookableUnit.objects.using(self.using).select_related("offering").filter(pk=pk).first()
        if unit is None:
            raise NotFoundError("BookableUnit", unit_id)
        return unit

    def _create_unit(self, child: Offering, unit_data) -> BookableUnit:
        if isinstance(unit_data, Mapping):
            label = str(unit_data.get("label") or "").strip()
            service_date = unit_data.get("service_date")
        else:
            label, service_date = str(unit_data).strip(), None
        if service_date is not None and not isinstance(service_date, date):
            service_date = parse_date(service_date, "service_date")
        if not label:
            raise ValueError("Unit label is required")

        existing = (
            BookableUnit.objects.using(self.using)
            .filter(offering=child, label=label, service_date=service_date)
            .first()
        )
        if existing is not None:
            raise DuplicateError("label", label, existing)
        return BookableUnit.objects.using(self.using).create(
            offering=child,
            label=label,
            service_date=service_date,
        )
