"""API views for the validated contracts (staff only, read-only)."""
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.periods import InvalidPeriodKey, validate_key
from participants.models import Participant

from .models import PERIOD_FIELDS
from .serializers import ValidatedContractSerializer
from .services import contracts_for_participant


class ParticipantContractListAPIView(APIView):
    """Validated contracts of one participant, optionally for one period.

    Query parameters: ``participant`` (required), ``granularity`` and
    ``period_key`` (together, e.g. ``month`` / ``2026-02``).
    """

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

        granularity = request.query_params.get("granularity")
        period_key = request.query_params.get("period_key")
        if granularity or period_key:
            if granularity not in PERIOD_FIELDS or not period_key:
                return Response(
                    {"detail": "granularity (day, week, month, quarter, year) et period_key requis."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            try:
                validate_key(granularity, period_key)
            except InvalidPeriodKey as exc:
                return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        queryset = contracts_for_participant(participant, granularity or None, period_key)
        return Response(ValidatedContractSerializer(queryset, many=True).data)
