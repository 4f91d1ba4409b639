from django.contrib import admin

from .models import Trip


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ["title", "destination", "user", "start_date", "end_date"]
    search_fields = ["title", "destination", "user__email"]
