"""FilterSet definitions for catalog listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Offering, Resource


class ResourceFilterSet(django_filters.FilterSet):
    kind = django_filters.ChoiceFilter(choices=Resource.Kind.choices)
    city = django_filters.CharFilter(field_name="city", lookup_expr="exact")

    class Meta:
        model = Resource
        fields = ["kind", "city"]


class OfferingFilterSet(django_filters.FilterSet):
    """Exact-match filters; endpoint labels are case-sensitive."""

    parent = django_filters.NumberFilter(field_name="parent_id", lookup_expr="exact")
    kind = django_filters.ChoiceFilter(choices=Offering.Kind.choices)
    name = django_filters.CharFilter(field_name="name", lookup_expr="exact")
    service_class = django_filters.CharFilter(field_name="service_class", lookup_expr="exact")
    origin = django_filters.CharFilter(field_name="origin", lookup_expr="exact")
    destination = django_filters.CharFilter(field_name="destination", lookup_expr="exact")
    departs_on = django_filters.DateFilter(field_name="departs_on")

    class Meta:
        model = Offering
        fields = [
            "parent",
            "kind",
            "name",
            "service_class",
            "origin",
            "destination",
            "departs_on",
        ]
