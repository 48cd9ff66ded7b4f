"""Catalog models for the travel inventory.

Durable record of bookable parents (hotels, trains), their children
(rooms, route offerings) and the bookable units availability is tracked
against. The explicit ``child_ids`` list on a parent mirrors the
``Offering.parent`` foreign key and is maintained only by the
referential integrity coordinator.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Resource(models.Model):
    """Bookable parent: a hotel or a train."""

    class Kind(models.TextChoices):
        HOTEL = "hotel", _("Hotel")
        TRAIN = "train", _("Train")

    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.HOTEL)
    name = models.CharField(max_length=255)
    registration_no = models.CharField(
        max_length=64,
        unique=True,
        help_text=_("Identifying key used to detect duplicate registrations."),
    )
    city = models.CharField(max_length=120, blank=True)
    description = models.TextField(blank=True)
    attributes = models.JSONField(default=dict, blank=True)
    child_ids = models.JSONField(
        default=list,
        blank=True,
        editable=False,
        help_text=_("Ids of offerings attached to this resource, in attach order."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Resource")
        verbose_name_plural = _("Resources")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["kind", "name"], name="resource_kind_name_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()} {self.name} ({self.registration_no})"


class Offering(models.Model):
    """Bookable child of a resource: a hotel room type or a train route offering."""

    class Kind(models.TextChoices):
        ROOM = "room", _("Room")
        ROUTE = "route", _("Route offering")

    parent = models.ForeignKey(
        Resource,
        on_delete=models.PROTECT,
        related_name="offerings",
    )
    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.ROOM)
    name = models.CharField(max_length=255)
    service_class = models.CharField(
        max_length=60,
        blank=True,
        help_text=_("Room category or seat class (deluxe, sleeper, 2A, ...)."),
    )
    origin = models.CharField(max_length=120, blank=True)
    destination = models.CharField(max_length=120, blank=True)
    departs_on = models.DateField(null=True, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    capacity = models.PositiveSmallIntegerField(default=1)
    description = models.TextField(blank=True)
    attributes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Offering")
        verbose_name_plural = _("Offerings")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["origin", "destination"], name="offering_route_idx"),
            models.Index(fields=["parent", "kind"], name="offering_parent_kind_idx"),
        ]

    def __str__(self) -> str:
        if self.kind == self.Kind.ROUTE:
            return f"{self.name}: {self.origin} -> {self.destination}"
        return self.name

    def clean(self) -> None:
        if self.kind == self.Kind.ROUTE and not (self.origin and self.destination):
            raise ValidationError(_("Route offerings need both an origin and a destination."))
        expected = {
            Resource.Kind.HOTEL: self.Kind.ROOM,
            Resource.Kind.TRAIN: self.Kind.ROUTE,
        }
        if self.parent_id and self.parent.kind in expected and expected[self.parent.kind] != self.kind:
            raise ValidationError(
                _("A %(parent)s cannot hold %(kind)s offerings.")
                % {"parent": self.parent.kind, "kind": self.kind}
            )


class BookableUnit(models.Model):
    """Smallest granularity availability is tracked against (room number, seat class on a date)."""

    offering = models.ForeignKey(
        Offering,
        on_delete=models.CASCADE,
        related_name="units",
    )
    label = models.CharField(max_length=60)
    service_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Bookable unit")
        verbose_name_plural = _("Bookable units")
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["offering", "label", "service_date"],
                name="unique_unit_per_offering",
            ),
        ]

    def __str__(self) -> str:
        if self.service_date:
            return f"{self.label} on {self.service_date.isoformat()}"
        return self.label
