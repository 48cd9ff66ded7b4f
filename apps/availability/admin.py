"""Admin registrations for the availability domain."""

from __future__ import annotations

from django.contrib import admin

from .models import UnavailableRange


@admin.register(UnavailableRange)
class UnavailableRangeAdmin(admin.ModelAdmin):
    list_display = ("unit", "start_date", "end_date", "source", "reference", "created_at")
    list_filter = ("source",)
    search_fields = ("reference", "unit__label", "unit__offering__name")
    date_hierarchy = "start_date"
    readonly_fields = ("created_at",)
