import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from django.conf import settings
from django.db import DatabaseError
from django.utils.module_loading import import_string
from rest_framework.exceptions import ValidationError

from velvet_routes.helpers.custom_exceptions import StorageError
from velvet_routes.helpers.enums import TravelMode

from .filters import InventoryFilter
from .models import InventoryItem

logger = logging.getLogger(__name__)

DETAIL_RELATIONS = [mode.lower() for mode in TravelMode.values]


def clean_criteria(criteria) -> dict:
    """
    Validate raw query parameters and return only the criteria that were
    given. Unknown keys are dropped, malformed values raise ``ValidationError``.
    """
    filterset = InventoryFilter(data=criteria, queryset=InventoryItem.objects.none())
    if not filterset.is_valid():
        raise ValidationError(filterset.errors)
    return {key: value for key, value in filterset.form.cleaned_data.items() if value not in (None, "")}


class InventoryRepository(ABC):
    """Read access to bookable inventory."""

    @abstractmethod
    def list_by_mode(self, mode: str) -> list:
        """Available items of one travel mode."""

    @abstractmethod
    def search(self, mode: str, criteria) -> list:
        """Available items of one travel mode matching ``criteria``."""

    @abstractmethod
    def get(self, item_id):
        """Any item by id, available or not. None when it does not exist."""


class DjangoInventoryRepository(InventoryRepository):
    def _queryset(self, mode: str | None = None):
        queryset = InventoryItem.objects.select_related("provider", *DETAIL_RELATIONS)
        if mode is not None:
            queryset = queryset.filter(travel_mode=mode, is_available=True)
        return queryset

    def _fetch(self, queryset) -> list:
        try:
            return list(queryset)
        except DatabaseError as exc:
            logger.error(f"Inventory query failed: {exc}", exc_info=True)
            raise StorageError() from exc

    def list_by_mode(self, mode: str) -> list[InventoryItem]:
        return self._fetch(self._queryset(mode))

    def search(self, mode: str, criteria) -> list[InventoryItem]:
        filterset = InventoryFilter(data=criteria, queryset=self._queryset(mode))
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return self._fetch(filterset.qs)

    def get(self, item_id) -> InventoryItem | None:
        try:
            item_id = int(item_id)
        except (TypeError, ValueError):
            return None
        items = self._fetch(self._queryset().filter(pk=item_id))
        return items[0] if items else None


@dataclass(frozen=True)
class InventoryRecord:
    """A plain inventory item, used where no database is wanted."""

    id: int
    provider_item_id: str
    travel_mode: str
    price_cents: int
    currency: str = "USD"
    searchable_location: str = ""
    is_available: bool = True
    title: str = ""
    details: dict = field(default_factory=dict)

    @property
    def location(self) -> str:
        return self.details.get("destination") or self.details.get("location") or self.searchable_location


class InMemoryInventoryRepository(InventoryRepository):
    def __init__(self, records=None):
        self._records: dict[int, InventoryRecord] = {record.id: record for record in records or []}

    def add(self, record: InventoryRecord) -> InventoryRecord:
        self._records[record.id] = record
        return record

    def list_by_mode(self, mode: str) -> list[InventoryRecord]:
        items = [r for r in self._records.values() if r.travel_mode == mode and r.is_available]
        return sorted(items, key=lambda r: (r.price_cents, r.id))

    def search(self, mode: str, criteria) -> list[InventoryRecord]:
        cleaned = clean_criteria(criteria)
        return [record for record in self.list_by_mode(mode) if self._matches(record, cleaned)]

    def get(self, item_id) -> InventoryRecord | None:
        try:
            return self._records.get(int(item_id))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _matches(record: InventoryRecord, criteria: dict) -> bool:
        details = record.details

        def contains(haystack, needle):
            return bool(haystack) and needle.lower() in str(haystack).lower()

        def depart_date(value):
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, str):
                return datetime.fromisoformat(value).date()
            return value

        checks = {
            "location": lambda v: contains(record.searchable_location, v) or contains(details.get("location"), v),
            "origin": lambda v: (
                contains(details.get("origin"), v) or str(details.get("origin_code", "")).lower() == v.lower()
            ),
            "destination": lambda v: (
                contains(details.get("destination"), v) or str(details.get("destination_code", "")).lower() == v.lower()
            ),
            "date": lambda v: details.get("depart_at") is not None and depart_date(details["depart_at"]) == v,
            "min_price": lambda v: record.price_cents >= v,
            "max_price": lambda v: record.price_cents <= v,
            "airline": lambda v: contains(details.get("airline"), v),
            "max_stops": lambda v: details.get("stops") is not None and details["stops"] <= v,
            "stars": lambda v: details.get("stars") is not None and details["stars"] >= v,
            "category": lambda v: str(details.get("category", "")).lower() == v.lower(),
        }
        return all(checks[key](value) for key, value in criteria.items() if key in checks)


@lru_cache(maxsize=None)
def _load_repository(path: str) -> InventoryRepository:
    return import_string(path)()


def get_inventory_repository() -> InventoryRepository:
    return _load_repository(settings.INVENTORY_REPOSITORY)
