"""Query router: search criteria resolved into catalog lookups."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from apps.catalog.models import Offering, Resource
from shared.domain.value_objects import Route


class QueryRouter:
    """Read-only lookups. Empty results are valid answers, never errors."""

    def __init__(self, using: str = "default"):
        self.using = using

    def find_by_route(
        self,
        origin: str,
        destination: str,
        *,
        on: Optional[date] = None,
    ) -> List[Offering]:
        """Route offerings whose endpoints match exactly (case-sensitive, direction matters)."""
        if not origin or not destination:
            return []
        route = Route(origin, destination)
        qs = Offering.objects.using(self.using).filter(
            kind=Offering.Kind.ROUTE,
            origin=route.origin,
            destination=route.destination,
        )
        if on is not None:
            qs = qs.filter(departs_on=on)
        # Collation-independent exactness check
        return [
            offering
            for offering in qs.select_related("parent").order_by("id")
            if offering.origin == route.origin and offering.destination == route.destination
        ]

    def find_by_name(
        self,
        key: str,
        *,
        prefix: bool = False,
        kind: Optional[str] = None,
    ) -> List[Resource]:
        """Parents whose name equals key (or starts with it when prefix=True)."""
        if not key:
            return []
        lookup = "name__startswith" if prefix else "name"
        qs = Resource.objects.using(self.using).filter(**{lookup: key})
        if kind:
            qs = qs.filter(kind=kind)
        if prefix:
            return [r for r in qs.order_by("id") if r.name.startswith(key)]
        return [r for r in qs.order_by("id") if r.name == key]

    def find_by_registration_no(self, registration_no: str) -> Optional[Resource]:
        """Duplicate-registration lookup on the identifying key."""
        if not registration_no:
            return None
        return (
            Resource.objects.using(self.using)
            .filter(registration_no=registration_no)
            .first()
        )
