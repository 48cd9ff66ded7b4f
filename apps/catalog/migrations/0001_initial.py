from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("hotel", "Hotel"), ("train", "Train")],
                        default="hotel",
                        max_length=10,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "registration_no",
                    models.CharField(
                        help_text="Identifying key used to detect duplicate registrations.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("city", models.CharField(blank=True, max_length=120)),
                ("description", models.TextField(blank=True)),
                ("attributes", models.JSONField(blank=True, default=dict)),
                (
                    "child_ids",
                    models.JSONField(
                        blank=True,
                        default=list,
                        editable=False,
                        help_text="Ids of offerings attached to this resource, in attach order.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Resource",
                "verbose_name_plural": "Resources",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["kind", "name"], name="resource_kind_name_idx")],
            },
        ),
        migrations.CreateModel(
            name="Offering",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("room", "Room"), ("route", "Route offering")],
                        default="room",
                        max_length=10,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "service_class",
                    models.CharField(
                        blank=True,
                        help_text="Room category or seat class (deluxe, sleeper, 2A, ...).",
                        max_length=60,
                    ),
                ),
                ("origin", models.CharField(blank=True, max_length=120)),
                ("destination", models.CharField(blank=True, max_length=120)),
                ("departs_on", models.DateField(blank=True, null=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("capacity", models.PositiveSmallIntegerField(default=1)),
                ("description", models.TextField(blank=True)),
                ("attributes", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="offerings",
                        to="catalog.resource",
                    ),
                ),
            ],
            options={
                "verbose_name": "Offering",
                "verbose_name_plural": "Offerings",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["origin", "destination"], name="offering_route_idx"),
                    models.Index(fields=["parent", "kind"], name="offering_parent_kind_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookableUnit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("label", models.CharField(max_length=60)),
                ("service_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "offering",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="units",
                        to="catalog.offering",
                    ),
                ),
            ],
            options={
                "verbose_name": "Bookable unit",
                "verbose_name_plural": "Bookable units",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("offering", "label", "service_date"),
                        name="unique_unit_per_offering",
                    )
                ],
            },
        ),
    ]
