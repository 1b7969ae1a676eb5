"""Django admin for participants."""
from django.contrib import admin

from participants.models import Participant
from participants.services import remove_mapping


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("full_name", "kind", "email", "external_id", "is_active")
    list_filter = ("kind", "is_active")
    search_fields = ("last_name", "first_name", "email", "external_id")
    readonly_fields = ("created_at", "updated_at")
    actions = ["remove_mappings"]

    @admin.action(description="Retirer le lien avec le flux de contrats")
    def remove_mappings(self, request, queryset):
        removed = sum(1 for participant in queryset if remove_mapping(participant.pk))
        self.message_user(request, f"{removed} lien(s) retire(s).")
