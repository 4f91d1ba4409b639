from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ["external_id", "booking", "user", "amount_cents", "currency", "status", "created_at"]
    list_filter = ["status", "provider", "created_at"]
    search_fields = ["external_id", "booking__reference", "user__email"]
    readonly_fields = ["external_id", "amount_cents", "currency", "provider", "metadata"]
