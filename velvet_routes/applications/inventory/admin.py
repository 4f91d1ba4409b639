from django.contrib import admin

from velvet_routes.applications.inventory.models import Bus, Car, Flight, Hotel, InventoryItem, Provider, Train


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ["name", "display_name", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name", "display_name"]


class HotelInline(admin.StackedInline):
    model = Hotel


class FlightInline(admin.StackedInline):
    model = Flight


class CarInline(admin.StackedInline):
    model = Car


class TrainInline(admin.StackedInline):
    model = Train


class BusInline(admin.StackedInline):
    model = Bus


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    """Inventory with the detail row matching its travel mode inline"""

    list_display = ["id", "provider_item_id", "travel_mode", "price_cents", "currency", "is_available", "provider"]
    list_filter = ["travel_mode", "is_available", "provider"]
    search_fields = ["provider_item_id", "searchable_location"]
    list_editable = ["is_available"]

    mode_inlines = {
        "HOTEL": HotelInline,
        "FLIGHT": FlightInline,
        "CAR": CarInline,
        "TRAIN": TrainInline,
        "BUS": BusInline,
    }

    def get_inlines(self, request, obj):
        if obj is None:
            return []
        return [self.mode_inlines[obj.travel_mode]]
