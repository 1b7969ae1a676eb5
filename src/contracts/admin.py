"""Admin configuration for the contracts app."""
from django.contrib import admin

from .models import ValidatedContract


@admin.register(ValidatedContract)
class ValidatedContractAdmin(admin.ModelAdmin):
    list_display = (
        "external_contract_id",
        "participant",
        "offer",
        "validated_at",
        "period_week",
        "period_month",
        "synced_at",
    )
    list_filter = ("period_year", "period_quarter", "offer__product_key")
    search_fields = ("external_contract_id", "external_participant_id", "external_prospect_id")
    date_hierarchy = "validated_at"
    raw_id_fields = ("participant", "offer")
    readonly_fields = ("metadata", "synced_at", "created_at", "updated_at")
