"""Serializers for the gamification API."""
from rest_framework import serializers

from participants.models import Participant

from . import services
from .models import Award, BadgeDefinition, RankSnapshot
from .tiers import next_tier


class BadgeDefinitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = BadgeDefinition
        fields = [
            "id", "code", "name", "description", "category",
            "condition", "tier", "icon_url", "is_active",
        ]


class AwardSerializer(serializers.ModelSerializer):
    badge_code = serializers.CharField(source="badge.code", read_only=True)
    badge_name = serializers.CharField(source="badge.name", read_only=True)
    participant_name = serializers.CharField(source="participant.full_name", read_only=True)

    class Meta:
        model = Award
        fields = [
            "id", "participant", "participant_name", "badge", "badge_code",
            "badge_name", "period_key", "awarded_at", "metadata",
        ]


class AwardCreateSerializer(serializers.Serializer):
    """Manual award: the badge may be given by id or by code."""

    participant = serializers.PrimaryKeyRelatedField(queryset=Participant.objects.all())
    badge = serializers.PrimaryKeyRelatedField(
        queryset=BadgeDefinition.objects.all(), required=False
    )
    badge_code = serializers.SlugRelatedField(
        slug_field="code",
        queryset=BadgeDefinition.objects.all(),
        required=False,
        source="badge_by_code",
    )
    period_key = serializers.CharField(max_length=16)
    metadata = serializers.JSONField(required=False, default=dict)

    def validate(self, attrs):
        badge = attrs.pop("badge_by_code", None) or attrs.get("badge")
        if badge is None:
            raise serializers.ValidationError("Indiquez badge ou badge_code.")
        attrs["badge"] = badge
        try:
            services.validate_award_period(badge, attrs["period_key"])
        except ValueError as exc:
            raise serializers.ValidationError({"period_key": str(exc)}) from exc
        return attrs


class RankSnapshotSerializer(serializers.ModelSerializer):
    participant_name = serializers.CharField(source="participant.full_name", read_only=True)
    participant_kind = serializers.CharField(source="participant.kind", read_only=True)
    points_to_next_tier = serializers.SerializerMethodField()

    class Meta:
        model = RankSnapshot
        fields = [
            "participant", "participant_name", "participant_kind", "period_type",
            "period_key", "rank", "points", "contracts_count", "computed_at",
            "metadata", "points_to_next_tier",
        ]

    def get_points_to_next_tier(self, obj):
        return next_tier(obj.points)[1]


class RecomputeRankingSerializer(serializers.Serializer):
    period_type = serializers.ChoiceField(choices=RankSnapshot.PeriodType.choices)
    period_key = serializers.CharField(max_length=10)
