"""Admin registrations for the catalog domain.

Offerings are deleted through the inventory engine so the parent's
child list is updated in the same transaction.
"""

from __future__ import annotations

from django.contrib import admin, messages

from apps.availability.engine import get_engine

from .models import BookableUnit, Offering, Resource


class BookableUnitInline(admin.TabularInline):
    model = BookableUnit
    extra = 0
    fields = ("label", "service_date")


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "registration_no", "city", "created_at")
    list_filter = ("kind", "city")
    search_fields = ("name", "registration_no")
    readonly_fields = ("child_ids", "created_at", "updated_at")
    actions = ("reconcile_children",)

    @admin.action(description="Rebuild child list from offerings")
    def reconcile_children(self, request, queryset):  # type: ignore
        integrity = get_engine().integrity
        for resource in queryset:
            integrity.reconcile(resource.pk)
        self.message_user(request, f"Reconciled {queryset.count()} resource(s)", messages.SUCCESS)


@admin.register(Offering)
class OfferingAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "parent", "origin", "destination", "departs_on", "price")
    list_filter = ("kind", "service_class")
    search_fields = ("name", "origin", "destination", "parent__name")
    readonly_fields = ("created_at", "updated_at")
    inlines = (BookableUnitInline,)

    def delete_model(self, request, obj):  # type: ignore
        get_engine().delete_child(obj.pk)

    def delete_queryset(self, request, queryset):  # type: ignore
        engine = get_engine()
        for pk in queryset.values_list("pk", flat=True):
            engine.delete_child(pk)
