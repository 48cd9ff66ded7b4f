import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="UnavailableRange",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "source",
                    models.CharField(
                        choices=[("reservation", "Accepted reservation"), ("manual", "Manual block")],
                        default="manual",
                        max_length=20,
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="Caller supplied reference (booking code, operator note).",
                        max_length=120,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="unavailable_ranges",
                        to="catalog.bookableunit",
                    ),
                ),
            ],
            options={
                "verbose_name": "Unavailable range",
                "verbose_name_plural": "Unavailable ranges",
                "ordering": ["start_date", "end_date", "id"],
                "indexes": [
                    models.Index(fields=["unit", "start_date", "end_date"], name="unavailable_unit_dates_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="unavailable_range_valid_dates",
                    ),
                    models.UniqueConstraint(
                        fields=("unit", "start_date", "end_date"),
                        name="unique_unavailable_range_per_unit",
                    ),
                ],
            },
        ),
    ]
