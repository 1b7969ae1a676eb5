"""URL configuration for the ProWin gamification back office."""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # API
    path("api/v1/contracts/", include("contracts.urls")),
    path("api/v1/gamification/", include("gamification.urls")),
]
