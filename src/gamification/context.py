"""Per-participant aggregates read by the badge conditions."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

from contracts.models import ValidatedContract
from core.periods import PeriodKeys, month_key, period_keys
from prospecting.models import PROSPECTED_STATUSES, DoorStatus, DoorStatusEvent


@dataclass
class EvaluationContext:
    participant: object
    now: datetime
    keys: PeriodKeys

    total_contracts: int = 0
    by_product: Counter = field(default_factory=Counter)
    by_day: Counter = field(default_factory=Counter)
    by_week: Counter = field(default_factory=Counter)
    by_month: Counter = field(default_factory=Counter)
    by_quarter_product: Counter = field(default_factory=Counter)
    contracts_this_month: int = 0
    contracts_this_quarter: int = 0
    # Weekly counts of the current month only, in chronological order.
    month_weeks: dict = field(default_factory=dict)
    distinct_badges: int = 0

    # Door activity (field sales only, left at zero for managers)
    max_prospected_doors_day: int = 0
    max_argued_day: int = 0
    max_distinct_doors_day: int = 0
    month_signed_events: int = 0
    month_argued_events: int = 0
    reengagement_conversions_month: int = 0
    reengagement_signatures: int = 0

    @property
    def current_day(self) -> str:
        return self.keys.day

    @property
    def current_week(self) -> str:
        return self.keys.week

    @property
    def current_month(self) -> str:
        return self.keys.month

    @property
    def current_quarter(self) -> str:
        return self.keys.quarter


class EvaluationContextBuilder:
    """Assemble an ``EvaluationContext`` from the contract and door history.

    ``now`` is frozen at construction so every participant of a run is
    evaluated against the same calendar.
    """

    def __init__(self, now: datetime | None = None) -> None:
        self.now = timezone.localtime(now or timezone.now())
        self.keys = period_keys(self.now)

    def build(self, participant) -> EvaluationContext:
        ctx = EvaluationContext(participant=participant, now=self.now, keys=self.keys)
        self._add_contracts(ctx)
        ctx.distinct_badges = (
            participant.awards.values("badge_id").distinct().count()
        )
        if participant.is_field_sales:
            self._add_door_activity(ctx)
        return ctx

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def _add_contracts(self, ctx: EvaluationContext) -> None:
        rows = (
            ValidatedContract.objects.filter(participant=ctx.participant)
            .order_by("validated_at")
            .values_list(
                "period_day",
                "period_week",
                "period_month",
                "period_quarter",
                "offer__product_key",
            )
        )
        for day, week, month, quarter, product_key in rows:
            ctx.total_contracts += 1
            ctx.by_day[day] += 1
            ctx.by_week[week] += 1
            ctx.by_month[month] += 1
            if product_key:
                ctx.by_product[product_key] += 1
                ctx.by_quarter_product[(quarter, product_key)] += 1
            if month == ctx.current_month:
                ctx.contracts_this_month += 1
                ctx.month_weeks[week] = ctx.month_weeks.get(week, 0) + 1
            if quarter == ctx.current_quarter:
                ctx.contracts_this_quarter += 1

    # ------------------------------------------------------------------
    # Door history
    # ------------------------------------------------------------------

    def _add_door_activity(self, ctx: EvaluationContext) -> None:
        events = (
            DoorStatusEvent.objects.filter(participant=ctx.participant)
            .order_by("occurred_at")
            .values_list("door_ref", "status", "occurred_at")
        )

        prospected_by_day = Counter()
        argued_by_day = Counter()
        doors_by_day = {}
        # Per door: saw ABSENT / saw ABSENT or RENDEZ_VOUS_PRIS before a signature
        after_absent = set()
        after_absent_or_meeting = set()
        converted_this_month = set()
        signed_after_follow_up = set()

        for door_ref, status, occurred_at in events:
            local = timezone.localtime(occurred_at)
            day = local.date()
            in_month = month_key(local) == ctx.current_month

            doors_by_day.setdefault(day, set()).add(door_ref)
            if status in PROSPECTED_STATUSES:
                prospected_by_day[day] += 1
            if status == DoorStatus.ARGUMENTE:
                argued_by_day[day] += 1
                if in_month:
                    ctx.month_argued_events += 1

            if status == DoorStatus.ABSENT:
                after_absent.add(door_ref)
                after_absent_or_meeting.add(door_ref)
            elif status == DoorStatus.RENDEZ_VOUS_PRIS:
                after_absent_or_meeting.add(door_ref)
            elif status == DoorStatus.CONTRAT_SIGNE:
                if in_month:
                    ctx.month_signed_events += 1
                    if door_ref in after_absent:
                        converted_this_month.add(door_ref)
                if door_ref in after_absent_or_meeting:
                    signed_after_follow_up.add(door_ref)

        ctx.max_prospected_doors_day = max(prospected_by_day.values(), default=0)
        ctx.max_argued_day = max(argued_by_day.values(), default=0)
        ctx.max_distinct_doors_day = max((len(doors) for doors in doors_by_day.values()), default=0)
        ctx.reengagement_conversions_month = len(converted_this_month)
        ctx.reengagement_signatures = len(signed_after_follow_up)
