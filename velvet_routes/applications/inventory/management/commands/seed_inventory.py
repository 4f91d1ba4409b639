import json
from pathlib import Path

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.dateparse import parse_datetime

from velvet_routes.applications.inventory.models import Bus, Car, Flight, Hotel, InventoryItem, Provider, Train
from velvet_routes.applications.users.models import Profile, User

DEFAULT_FIXTURE = Path(__file__).resolve().parents[2] / "fixtures" / "demo_catalog.json"

DETAIL_MODELS = {
    "HOTEL": Hotel,
    "FLIGHT": Flight,
    "CAR": Car,
    "TRAIN": Train,
    "BUS": Bus,
}

DATETIME_FIELDS = ("depart_at", "arrive_at")


class Command(BaseCommand):
    """
    Load the demo catalog: providers, hotels, flights, cars, trains, buses
    and two demo accounts. Running it again updates the rows in place.
    """

    help = "Seed providers, inventory and demo users"

    def add_arguments(self, parser):
        parser.add_argument("--fixture", default=str(DEFAULT_FIXTURE), help="Path to a catalog JSON file")
        parser.add_argument("--skip-users", action="store_true", help="Do not create the demo accounts")

    @transaction.atomic
    def handle(self, *args, **options):
        with open(options["fixture"], encoding="utf-8") as fh:
            catalog = json.load(fh)

        if not options["skip_users"]:
            for entry in catalog.get("users", []):
                self.seed_user(entry)
            self.stdout.write(self.style.SUCCESS(f"Seeded {len(catalog.get('users', []))} users"))

        providers = {entry["name"]: self.seed_provider(entry) for entry in catalog.get("providers", [])}
        self.stdout.write(self.style.SUCCESS(f"Seeded {len(providers)} providers"))

        counts = {}
        for entry in catalog.get("items", []):
            item = self.seed_item(entry, providers[entry["provider"]])
            counts[item.travel_mode] = counts.get(item.travel_mode, 0) + 1

        for mode, count in sorted(counts.items()):
            self.stdout.write(self.style.SUCCESS(f"Seeded {count} {mode.lower()} items"))

    def seed_user(self, entry: dict) -> User:
        entry = dict(entry)
        password = entry.pop("password")
        profile_data = entry.pop("profile", {})

        user = User.objects.filter(email=entry["email"]).first()
        if user is None:
            if entry.get("role") == "ADMIN":
                user = User.objects.create_superuser(password=password, **entry)
            else:
                user = User.objects.create_user(password=password, is_verified=True, **entry)
        else:
            self.stdout.write(self.style.WARNING(f"User {user.email} already exists."))

        if profile_data:
            Profile.objects.update_or_create(user=user, defaults=profile_data)
        return user

    def seed_provider(self, entry: dict) -> Provider:
        provider, _ = Provider.objects.update_or_create(
            name=entry["name"],
            defaults={key: value for key, value in entry.items() if key != "name"},
        )
        return provider

    def seed_item(self, entry: dict, provider: Provider) -> InventoryItem:
        details = dict(entry["details"])
        for field in DATETIME_FIELDS:
            if field in details:
                details[field] = parse_datetime(details[field])

        item, _ = InventoryItem.objects.update_or_create(
            provider=provider,
            provider_item_id=entry["provider_item_id"],
            defaults={
                "travel_mode": entry["travel_mode"],
                "price_cents": entry["price_cents"],
                "currency": entry.get("currency", "USD"),
                "searchable_location": entry["searchable_location"],
                "is_available": entry.get("is_available", True),
                "raw_data": entry.get("raw_data", {"providerItemId": entry["provider_item_id"]}),
            },
        )
        DETAIL_MODELS[item.travel_mode].objects.update_or_create(item=item, defaults=details)
        return item
