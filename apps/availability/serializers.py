"""Serializers for the availability API.

Dates are accepted as plain strings and validated by the engine, so a
malformed or inverted range comes back as a rejected reservation with
reason ``invalid_range`` rather than a generic field error.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DateRange


class DateRangeInputSerializer(serializers.Serializer):
    start_date = serializers.CharField()
    end_date = serializers.CharField()
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class UnavailableDatesSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class AvailableUnitsQuerySerializer(serializers.Serializer):
    to = serializers.CharField()
    start_date = serializers.CharField()
    end_date = serializers.CharField()

    def get_fields(self):  # type: ignore
        fields = super().get_fields()
        fields["from"] = serializers.CharField()
        return fields


def range_data(dates: DateRange) -> dict:
    return {
        "start_date": dates.start_date.isoformat(),
        "end_date": dates.end_date.isoformat(),
        "nights": len(dates),
    }
