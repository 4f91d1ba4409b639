from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ["id", "inventory_item", "user", "rating", "created_at"]
    list_filter = ["rating", "created_at"]
    search_fields = ["title", "body", "user__email"]
