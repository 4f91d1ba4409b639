import auto_prefetch
import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import velvet_routes.applications.inventory.models


def detail_fields(related_name, *fields):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        *fields,
        (
            "item",
            auto_prefetch.OneToOneField(
                on_delete=django.db.models.deletion.CASCADE,
                related_name=related_name,
                to="inventory.inventoryitem",
            ),
        ),
    ]


DETAIL_OPTIONS = {"abstract": False, "base_manager_name": "prefetch_manager"}


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Provider",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("display_name", models.CharField(max_length=255)),
                ("base_url", models.URLField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "supported_modes",
                    models.JSONField(
                        blank=True, default=velvet_routes.applications.inventory.models.default_supported_modes
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict)),
            ],
            options={
                "ordering": ["name"],
                "abstract": False,
                "base_manager_name": "prefetch_manager",
            },
        ),
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("provider_item_id", models.CharField(max_length=255)),
                (
                    "travel_mode",
                    models.CharField(
                        choices=[
                            ("HOTEL", "Hotel"),
                            ("FLIGHT", "Flight"),
                            ("CAR", "Car Rental"),
                            ("TRAIN", "Train"),
                            ("BUS", "Bus"),
                        ],
                        db_index=True,
                        max_length=10,
                    ),
                ),
                (
                    "price_cents",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("searchable_location", models.CharField(db_index=True, max_length=255)),
                ("is_available", models.BooleanField(default=True)),
                ("raw_data", models.JSONField(blank=True, default=dict)),
                (
                    "provider",
                    auto_prefetch.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="items",
                        to="inventory.provider",
                    ),
                ),
            ],
            options={
                "ordering": ["price_cents", "id"],
                "abstract": False,
                "base_manager_name": "prefetch_manager",
                "indexes": [models.Index(fields=["travel_mode", "is_available"], name="inventory_mode_avail_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("provider", "provider_item_id"), name="unique_provider_item"),
                    models.CheckConstraint(condition=models.Q(("price_cents__gt", 0)), name="inventory_price_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Hotel",
            fields=detail_fields(
                "hotel",
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(max_length=255)),
                ("address", models.TextField(blank=True)),
                (
                    "rating",
                    models.DecimalField(
                        blank=True,
                        decimal_places=1,
                        max_digits=2,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                (
                    "stars",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MaxValueValidator(5)]
                    ),
                ),
                ("amenities", models.JSONField(blank=True, default=dict)),
                ("check_in_time", models.CharField(blank=True, max_length=5)),
                ("check_out_time", models.CharField(blank=True, max_length=5)),
                ("image_url", models.URLField(blank=True)),
            ),
            options=DETAIL_OPTIONS,
        ),
        migrations.CreateModel(
            name="Flight",
            fields=detail_fields(
                "flight",
                ("airline", models.CharField(max_length=100)),
                ("flight_number", models.CharField(max_length=20)),
                ("origin", models.CharField(max_length=100)),
                ("origin_code", models.CharField(blank=True, max_length=3)),
                ("destination", models.CharField(max_length=100)),
                ("destination_code", models.CharField(blank=True, max_length=3)),
                ("depart_at", models.DateTimeField()),
                ("arrive_at", models.DateTimeField()),
                ("duration", models.PositiveIntegerField(help_text="Minutes")),
                ("stops", models.PositiveSmallIntegerField(default=0)),
                ("aircraft_type", models.CharField(blank=True, max_length=100)),
                ("cabin_class", models.CharField(blank=True, max_length=50)),
            ),
            options=DETAIL_OPTIONS,
        ),
        migrations.CreateModel(
            name="Car",
            fields=detail_fields(
                "car",
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(max_length=50)),
                ("supplier", models.CharField(max_length=100)),
                ("location", models.CharField(max_length=255)),
                ("seats", models.PositiveSmallIntegerField()),
                ("doors", models.PositiveSmallIntegerField()),
                ("transmission", models.CharField(max_length=20)),
                ("fuel_type", models.CharField(max_length=20)),
                ("features", models.JSONField(blank=True, default=dict)),
                ("image_url", models.URLField(blank=True)),
            ),
            options=DETAIL_OPTIONS,
        ),
        migrations.CreateModel(
            name="Train",
            fields=detail_fields(
                "train",
                ("operator", models.CharField(max_length=100)),
                ("train_number", models.CharField(max_length=20)),
                ("origin", models.CharField(max_length=100)),
                ("destination", models.CharField(max_length=100)),
                ("depart_at", models.DateTimeField()),
                ("arrive_at", models.DateTimeField()),
                ("duration", models.PositiveIntegerField(help_text="Minutes")),
                ("train_class", models.CharField(blank=True, max_length=50)),
                ("amenities", models.JSONField(blank=True, default=dict)),
            ),
            options=DETAIL_OPTIONS,
        ),
        migrations.CreateModel(
            name="Bus",
            fields=detail_fields(
                "bus",
                ("operator", models.CharField(max_length=100)),
                ("bus_number", models.CharField(max_length=20)),
                ("origin", models.CharField(max_length=100)),
                ("destination", models.CharField(max_length=100)),
                ("depart_at", models.DateTimeField()),
                ("arrive_at", models.DateTimeField()),
                ("duration", models.PositiveIntegerField(help_text="Minutes")),
                ("bus_type", models.CharField(blank=True, max_length=50)),
                ("amenities", models.JSONField(blank=True, default=dict)),
            ),
            options={**DETAIL_OPTIONS, "verbose_name_plural": "buses"},
        ),
    ]
