"""App config for the prospecting module."""
from django.apps import AppConfig


class ProspectingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "prospecting"
    verbose_name = "Prospection porte-a-porte"
