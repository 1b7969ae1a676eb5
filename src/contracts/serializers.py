"""Serializers for the contracts API."""
from rest_framework import serializers

from .models import ValidatedContract


class ValidatedContractSerializer(serializers.ModelSerializer):
    offer_name = serializers.CharField(source="offer.name", read_only=True, default="")
    product_key = serializers.CharField(source="offer.product_key", read_only=True, default=None)
    points = serializers.SerializerMethodField()

    class Meta:
        model = ValidatedContract
        fields = [
            "id", "external_contract_id", "participant", "offer", "offer_name",
            "product_key", "points", "validated_at", "signed_at", "period_day",
            "period_week", "period_month", "period_quarter", "period_year",
        ]

    def get_points(self, obj):
        return str(obj.offer.points) if obj.offer else "0"
