"""Serializers for the catalog domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import BookableUnit, Offering, Resource


class BookableUnitSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookableUnit
        fields = ["id", "offering", "label", "service_date", "created_at"]
        read_only_fields = ["offering", "created_at"]


class ResourceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Resource
        fields = [
            "id",
            "kind",
            "name",
            "registration_no",
            "city",
            "description",
            "attributes",
            "child_ids",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["child_ids", "created_at", "updated_at"]


class ResourceWriteSerializer(serializers.Serializer):
    """Input for registering or updating a hotel/train; uniqueness is checked by the engine."""

    kind = serializers.ChoiceField(choices=Resource.Kind.choices, required=False)
    name = serializers.CharField(max_length=255)
    registration_no = serializers.CharField(max_length=64)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    attributes = serializers.DictField(required=False)


class OfferingSerializer(serializers.ModelSerializer):
    parent_id = serializers.ReadOnlyField(source="parent.id")
    units = BookableUnitSerializer(many=True, read_only=True)

    class Meta:
        model = Offering
        fields = [
            "id",
            "parent_id",
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
            "units",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UnitInputSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=60)
    service_date = serializers.DateField(required=False, allow_null=True)


class OfferingWriteSerializer(serializers.Serializer):
    """Input for creating or updating an offering. The parent comes from the URL."""

    kind = serializers.ChoiceField(choices=Offering.Kind.choices, required=False)
    name = serializers.CharField(max_length=255)
    service_class = serializers.CharField(max_length=60, required=False, allow_blank=True)
    origin = serializers.CharField(max_length=120, required=False, allow_blank=True)
    destination = serializers.CharField(max_length=120, required=False, allow_blank=True)
    departs_on = serializers.DateField(required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    capacity = serializers.IntegerField(min_value=0, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    attributes = serializers.DictField(required=False)
    units = UnitInputSerializer(many=True, required=False)


class RouteQuerySerializer(serializers.Serializer):
    # "from" is a keyword, so the field is declared under its query name below
    to = serializers.CharField()
    on = serializers.DateField(required=False)

    def get_fields(self):  # type: ignore
        fields = super().get_fields()
        fields["from"] = serializers.CharField()
        return fields


class NameQuerySerializer(serializers.Serializer):
    name = serializers.CharField()
    prefix = serializers.BooleanField(required=False, default=False)
    kind = serializers.ChoiceField(choices=Resource.Kind.choices, required=False)
