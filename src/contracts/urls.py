"""URL routes for the contracts API (mounted under /api/v1/contracts/)."""
from django.urls import path

from . import views

app_name = "contracts"

urlpatterns = [
    path("", views.ParticipantContractListAPIView.as_view(), name="contract-list"),
]
