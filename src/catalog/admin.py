"""Admin configuration for the catalog app."""
from django.contrib import admin

from .models import Offer


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "supplier", "base_price", "product_key", "is_active", "synced_at")
    list_filter = ("product_key", "is_active", "category")
    search_fields = ("name", "external_id", "supplier")
    list_editable = ("product_key",)
    readonly_fields = ("id", "external_id", "synced_at", "created_at", "updated_at")
