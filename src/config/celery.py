"""Celery configuration."""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.dev"),
)

app = Celery("prowin")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Beat schedule (CELERY_TIMEZONE)
app.conf.beat_schedule = {
    "gamification-daily-pipeline": {
        "task": "gamification.tasks.run_daily_pipeline",
        "schedule": crontab(minute=0, hour=2),  # Daily at 2am
    },
    "gamification-quarterly-trophies": {
        "task": "gamification.tasks.evaluate_quarterly_trophies",
        "schedule": crontab(minute=0, hour=3, day_of_month=1),  # 1st of month, 3am
    },
    "gamification-monthly-rankings": {
        "task": "gamification.tasks.evaluate_monthly_rankings",
        "schedule": crontab(minute=15, hour=3, day_of_month=1),  # 1st of month, 3:15am
    },
}
