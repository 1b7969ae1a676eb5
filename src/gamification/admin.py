"""Django admin for the gamification module."""
from django.contrib import admin, messages

from core.periods import InvalidPeriodKey

from . import services
from .models import Award, BadgeDefinition, RankSnapshot


@admin.register(BadgeDefinition)
class BadgeDefinitionAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "category", "tier", "is_active", "award_count")
    list_filter = ("category", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("category", "tier", "code")
    actions = ["activate_badges", "deactivate_badges"]

    def award_count(self, obj):
        return obj.awards.count()
    award_count.short_description = "Attributions"

    @admin.action(description="Activer les badges selectionnes")
    def activate_badges(self, request, queryset):
        for badge in queryset:
            services.set_badge_active(badge, True)
        self.message_user(request, f"{queryset.count()} badge(s) active(s).")

    @admin.action(description="Desactiver les badges selectionnes")
    def deactivate_badges(self, request, queryset):
        for badge in queryset:
            services.set_badge_active(badge, False)
        self.message_user(request, f"{queryset.count()} badge(s) desactive(s).")


@admin.register(Award)
class AwardAdmin(admin.ModelAdmin):
    list_display = ("badge", "participant", "period_key", "awarded_at")
    list_filter = ("badge__category", "period_key")
    search_fields = ("badge__code", "participant__last_name", "participant__first_name")
    raw_id_fields = ("participant", "badge")
    readonly_fields = ("metadata", "created_at", "updated_at")


@admin.register(RankSnapshot)
class RankSnapshotAdmin(admin.ModelAdmin):
    list_display = ("period_type", "period_key", "rank", "participant", "points", "contracts_count", "tier_display")
    list_filter = ("period_type", "period_key")
    search_fields = ("participant__last_name", "participant__first_name")
    readonly_fields = ("computed_at", "metadata", "created_at", "updated_at")
    ordering = ("period_type", "-period_key", "rank")
    actions = ["recompute_rankings"]

    def tier_display(self, obj):
        return (obj.metadata or {}).get("tier", "")
    tier_display.short_description = "Palier"

    @admin.action(description="Recalculer les classements selectionnes")
    def recompute_rankings(self, request, queryset):
        periods = set(queryset.values_list("period_type", "period_key"))
        for period_type, period_key in sorted(periods):
            try:
                result = services.recompute_ranking(period_type, period_key)
            except InvalidPeriodKey as exc:
                self.message_user(request, str(exc), level=messages.ERROR)
                continue
            self.message_user(
                request, f"{period_type} {period_key}: {result['computed']} participant(s) classe(s)."
            )
