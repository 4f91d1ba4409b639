from django.contrib import admin

from .models import Booking, BookingHistory, BookingItem, Invoice


class BookingItemInline(admin.TabularInline):
    model = BookingItem
    extra = 0
    readonly_fields = ["inventory_item", "travel_mode", "title", "quantity", "unit_price_cents", "start_date", "end_date"]
    fields = readonly_fields
    can_delete = False


class InvoiceInline(admin.StackedInline):
    model = Invoice
    extra = 0
    readonly_fields = ["number", "total_cents", "currency", "pdf_url", "issued_at"]
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["reference", "user", "status", "total_amount_cents", "currency", "created_at"]
    list_filter = ["status", "items__travel_mode", "created_at"]
    search_fields = ["reference", "user__email", "customer_email", "payment__external_id"]
    readonly_fields = ["reference", "total_amount_cents", "currency", "created_at", "updated_at"]
    inlines = [BookingItemInline, InvoiceInline]


@admin.register(BookingHistory)
class BookingHistoryAdmin(admin.ModelAdmin):
    """Admin interface for booking history entries"""

    list_display = ["id", "booking", "status", "changed_at", "get_changed_by"]
    list_filter = ["status", "changed_at"]
    search_fields = ["booking__reference", "notes", "changed_by__email"]
    readonly_fields = ["booking", "status", "changed_at", "notes", "changed_by"]

    @admin.display(description="Changed By")
    def get_changed_by(self, obj):
        if obj.changed_by:
            return obj.changed_by.email
        return "System"
