"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True

REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [  # noqa: F405
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
]

# Logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
