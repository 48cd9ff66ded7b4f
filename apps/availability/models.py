"""Availability ledger storage.

One row per entry in a bookable unit's unavailability set. Entries are
half-open ``[start_date, end_date)`` ranges; an identical range can be
stored only once per unit, which keeps duplicate marks idempotent even
when two writers race past the domain check.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class UnavailableRange(models.Model):
    """Range of nights during which a unit cannot be booked."""

    class Source(models.TextChoices):
        RESERVATION = "reservation", _("Accepted reservation")
        MANUAL = "manual", _("Manual block")

    unit = models.ForeignKey(
        "catalog.BookableUnit",
        on_delete=models.CASCADE,
        related_name="unavailable_ranges",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    source = models.CharField(
        max_length=20,
        choices=Source.choices,
        default=Source.MANUAL,
    )
    reference = models.CharField(
        max_length=120,
        blank=True,
        help_text=_("Caller supplied reference (booking code, operator note)."),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Unavailable range")
        verbose_name_plural = _("Unavailable ranges")
        ordering = ["start_date", "end_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="unavailable_range_valid_dates",
            ),
            models.UniqueConstraint(
                fields=["unit", "start_date", "end_date"],
                name="unique_unavailable_range_per_unit",
            ),
        ]
        indexes = [
            models.Index(fields=["unit", "start_date", "end_date"], name="unavailable_unit_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"Unit {self.unit_id}: [{self.start_date}, {self.end_date}) ({self.source})"
