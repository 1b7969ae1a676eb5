"""URL routes for the gamification API (mounted under /api/v1/gamification/)."""
from django.urls import path

from . import views

app_name = "gamification"

urlpatterns = [
    path("awards/", views.AwardListCreateAPIView.as_view(), name="award-list"),
    path("awards/<uuid:pk>/", views.AwardDetailAPIView.as_view(), name="award-detail"),
    path("rankings/", views.RankingListAPIView.as_view(), name="ranking-list"),
    path("rankings/recompute/", views.RankingRecomputeAPIView.as_view(), name="ranking-recompute"),
    path("badges/", views.BadgeListAPIView.as_view(), name="badge-list"),
    path("badges/seed/", views.BadgeSeedAPIView.as_view(), name="badge-seed"),
    path("pipeline/daily/", views.DailyPipelineAPIView.as_view(), name="pipeline-daily"),
    path("pipeline/monthly/", views.MonthlyEvaluationAPIView.as_view(), name="pipeline-monthly"),
]
