"""API views for the gamification administrative surface (staff only)."""
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.periods import InvalidPeriodKey
from participants.models import Participant

from . import services
from .models import BadgeDefinition, RankSnapshot
from .serializers import (
    AwardCreateSerializer,
    AwardSerializer,
    BadgeDefinitionSerializer,
    RankSnapshotSerializer,
    RecomputeRankingSerializer,
)


class AwardListCreateAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        participant_id = request.query_params.get("participant")
        if not participant_id:
            return Response(
                {"detail": "Parametre participant requis."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            participant = get_object_or_404(Participant, pk=participant_id)
        except ValidationError:
            return Response({"detail": "Participant invalide."}, status=status.HTTP_400_BAD_REQUEST)
        queryset = services.awards_for_participant(participant)
        return Response(AwardSerializer(queryset, many=True).data)

    def post(self, request):
        serializer = AwardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.award_badge(
            data["participant"], data["badge"], data["period_key"], data.get("metadata")
        )
        return Response(
            {"awarded": result.awarded, "award": AwardSerializer(result.award).data if result.award else None},
            status=status.HTTP_201_CREATED if result.awarded else status.HTTP_200_OK,
        )


class AwardDetailAPIView(APIView):
    permission_classes = [IsAdminUser]

    def delete(self, request, pk):
        if not services.revoke_award(pk):
            return Response({"detail": "Attribution introuvable."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RankingListAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        period_type = request.query_params.get("period_type")
        period_key = request.query_params.get("period_key")
        if period_type not in RankSnapshot.PeriodType.values or not period_key:
            return Response(
                {"detail": "period_type et period_key requis."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        queryset = services.leaderboard(period_type, period_key)
        return Response(RankSnapshotSerializer(queryset, many=True).data)


class RankingRecomputeAPIView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = RecomputeRankingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = services.recompute_ranking(**serializer.validated_data)
        except InvalidPeriodKey as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)


class BadgeListAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        queryset = BadgeDefinition.objects.all()
        category = request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)
        if request.query_params.get("active") == "1":
            queryset = queryset.filter(is_active=True)
        return Response(BadgeDefinitionSerializer(queryset, many=True).data)


class BadgeSeedAPIView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request):
        result = services.seed_badge_catalog()
        return Response(
            {
                "created": result.created,
                "updated": result.updated,
                "total": result.total,
                "version": result.version,
            }
        )


class DailyPipelineAPIView(APIView):
    """Queue the daily pipeline."""

    permission_classes = [IsAdminUser]

    def post(self, request):
        from gamification.tasks import run_daily_pipeline

        task = run_daily_pipeline.delay()
        return Response({"task_id": task.id}, status=status.HTTP_202_ACCEPTED)


class MonthlyEvaluationAPIView(APIView):
    """Queue trophies + monthly rankings."""

    permission_classes = [IsAdminUser]

    def post(self, request):
        from gamification.tasks import run_monthly_evaluation

        task = run_monthly_evaluation.delay()
        return Response({"task_id": task.id}, status=status.HTTP_202_ACCEPTED)
