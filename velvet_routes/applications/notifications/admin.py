from django.contrib import admin

from .models import Notification, PushSubscription


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "channel", "recipient", "status", "booking", "created_at"]
    list_filter = ["channel", "status", "created_at"]
    search_fields = ["recipient", "user__email", "booking__reference"]
    readonly_fields = ["user", "booking", "channel", "recipient", "message", "payload", "error", "delivered_at"]


@admin.register(PushSubscription)
class PushSubscriptionAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "endpoint", "created_at"]
    search_fields = ["user__email", "endpoint"]
