"""Admin configuration for the prospecting app."""
from django.contrib import admin

from .models import DoorStatusEvent


@admin.register(DoorStatusEvent)
class DoorStatusEventAdmin(admin.ModelAdmin):
    list_display = ("door_ref", "participant", "status", "occurred_at")
    list_filter = ("status",)
    search_fields = ("door_ref", "participant__last_name", "participant__first_name")
    date_hierarchy = "occurred_at"
    raw_id_fields = ("participant",)
