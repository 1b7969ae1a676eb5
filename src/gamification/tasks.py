"""Celery tasks for the gamification module (scheduled pipeline).

Daily:   offers + contracts sync -> badge evaluation -> rankings
         (+ weekly conversion ranking on Mondays)
Monthly: quarterly trophies, monthly performance / transformation rankings

Each stage is isolated: a failure is logged and reported in the returned
summary, the following stages still run.
"""
from __future__ import annotations

import logging
import time

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger("prowin")

QUARTER_START_MONTHS = (1, 4, 7, 10)


def _run_stage(stage: str, func, *args, **kwargs) -> dict:
    started = time.monotonic()
    try:
        result = func(*args, **kwargs)
    except Exception as exc:
        logger.exception("Stage %s failed: %s", stage, exc, extra={"stage": stage})
        return {"status": "failed", "error": str(exc)}
    duration_ms = int((time.monotonic() - started) * 1000)
    if isinstance(result, dict) and result.get("status") == "skipped":
        return result
    return {"status": "ok", "duration_ms": duration_ms, **(result or {})}


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def sync_feed() -> dict:
    """Pull offers and validated contracts from the feed with a service token."""
    from catalog.services import sync_offers
    from contracts.clients import WinleadPlusClient, fetch_service_token, keycloak_configured
    from contracts.services import sync_contracts

    if not keycloak_configured():
        logger.warning(
            "Keycloak settings missing (KEYCLOAK_BASE_URL, KEYCLOAK_CLIENT_ID, "
            "KEYCLOAK_CLIENT_SECRET), contract sync skipped",
            extra={"stage": "ingestion"},
        )
        return {"status": "skipped", "reason": "keycloak_not_configured"}

    client = WinleadPlusClient(fetch_service_token())
    offers = sync_offers(client.get_offers())
    contracts = sync_contracts(client)
    return {"offers": offers, "contracts": contracts}


def evaluate_badges(now=None) -> dict:
    from gamification.engine import EvaluationEngine

    return EvaluationEngine(now=now).evaluate_all()


def compute_all_rankings(now=None) -> dict:
    """Rankings of the current day, week, month, quarter and year."""
    from core.periods import period_keys
    from gamification.leaderboard import PERIOD_GRANULARITIES, RankingEngine

    keys = period_keys(timezone.localtime(now or timezone.now()))
    engine = RankingEngine()
    computed = {}
    for period_type, granularity in PERIOD_GRANULARITIES.items():
        key = keys.for_granularity(granularity)
        computed[f"{period_type}/{key}"] = engine.compute(period_type, key)["computed"]
    return {"rankings": computed}


def pipeline_daily(now=None) -> dict:
    from core.periods import previous_week_key
    from gamification.comparative import ComparativeEvaluator

    now = timezone.localtime(now or timezone.now())
    logger.info("Daily gamification pipeline started")
    started = time.monotonic()

    summary = {
        "ingestion": _run_stage("ingestion", sync_feed),
        "evaluation": _run_stage("evaluation", evaluate_badges, now=now),
    }
    if now.isoweekday() == 1:
        summary["conversion_ranking"] = _run_stage(
            "conversion_ranking",
            ComparativeEvaluator().evaluate_conversion_ranking,
            previous_week_key(now),
        )
    summary["ranking"] = _run_stage("ranking", compute_all_rankings, now=now)

    logger.info(
        "Daily gamification pipeline finished in %ds",
        int(time.monotonic() - started),
        extra={"stage": "pipeline", "duration_ms": int((time.monotonic() - started) * 1000)},
    )
    return summary


def trophies_for(today) -> dict:
    from core.periods import previous_quarter_key
    from gamification.comparative import ComparativeEvaluator

    if today.month not in QUARTER_START_MONTHS:
        logger.debug("Trophy evaluation skipped (month %d does not start a quarter)", today.month)
        return {"status": "skipped", "reason": "not_quarter_start"}
    quarter = previous_quarter_key(today)
    return {"quarter": quarter, **ComparativeEvaluator().evaluate_trophies(quarter)}


def monthly_rankings_for(today) -> dict:
    from core.periods import previous_month_key
    from gamification.comparative import ComparativeEvaluator

    month = previous_month_key(today)
    evaluator = ComparativeEvaluator()
    return {
        "month": month,
        "performance": _run_stage("performance_ranking", evaluator.evaluate_performance_ranking, month),
        "transformation": _run_stage(
            "transformation_ranking", evaluator.evaluate_transformation_ranking, month
        ),
    }


# ---------------------------------------------------------------------------
# Celery entry points
# ---------------------------------------------------------------------------

@shared_task(name="gamification.tasks.run_daily_pipeline")
def run_daily_pipeline():
    """Scheduled daily at 02:00 (Celery Beat)."""
    return pipeline_daily()


@shared_task(name="gamification.tasks.evaluate_quarterly_trophies")
def evaluate_quarterly_trophies():
    """Scheduled on the 1st of each month; only acts when a quarter starts."""
    return _run_stage("trophies", trophies_for, timezone.localdate())


@shared_task(name="gamification.tasks.evaluate_monthly_rankings")
def evaluate_monthly_rankings():
    """Scheduled on the 1st of each month, evaluates the previous month."""
    return _run_stage("monthly_rankings", monthly_rankings_for, timezone.localdate())


@shared_task(name="gamification.tasks.run_monthly_evaluation")
def run_monthly_evaluation():
    """Trophies then monthly rankings, each failing independently."""
    today = timezone.localdate()
    return {
        "trophies": _run_stage("trophies", trophies_for, today),
        "monthly_rankings": _run_stage("monthly_rankings", monthly_rankings_for, today),
    }
