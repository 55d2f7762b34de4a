"""Dashboard analytics: status breakdown, last-7-days activity, overall stats."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, ensure_utc, system_clock
from app.domain.enums import UNRESOLVED_FOLLOW_UP_STATUSES, ActivityType, VendorStatus
from app.repositories.activity_log import ActivityLogRepository
from app.repositories.follow_up import FollowUpRepository
from app.repositories.vendor_request import VendorRequestRepository

logger = logging.getLogger(__name__)

WINDOW_DAYS = 7

PENDING_STATUSES = (
    VendorStatus.AWAITING_RESPONSE.value,
    VendorStatus.AWAITING_VALIDATION.value,
    VendorStatus.MISSING_DATA.value,
)


@dataclass
class DailyMetric:
    date: str  # "Mar 2"
    interactions: int = 0
    new_vendors: int = 0
    form_submissions: int = 0


@dataclass
class OverallStats:
    total_vendors: int
    requested_vendors: int
    validated_vendors: int
    pending_vendors: int
    denied_vendors: int
    total_interactions_last_7_days: int
    avg_daily_interactions: float
    active_rate: int  # validated / total, percent
    total_follow_ups: int
    unresolved_follow_ups: int


@dataclass
class VendorAnalytics:
    daily_metrics: list[DailyMetric]
    overall_stats: OverallStats
    status_breakdown: dict[str, int] = field(default_factory=dict)


def _label(day: date) -> str:
    return f"{day:%b} {day.day}"


class AnalyticsService:
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._requests = VendorRequestRepository(session)
        self._activity = ActivityLogRepository(session)
        self._follow_ups = FollowUpRepository(session)
        self._clock = clock

    async def vendor_analytics(self) -> VendorAnalytics:
        """Read-only snapshot for the procurement dashboard.

        Daily buckets are UTC calendar days, oldest first, ending today.
        Deleted requests are left out of the status counts but still count
        as new vendors on the day they were created.
        """
        logger.info("Generating vendor analytics")
        today = self._clock.today()
        first_day = today - timedelta(days=WINDOW_DAYS - 1)
        since = datetime.combine(first_day, time.min, tzinfo=timezone.utc)

        activities = await self._activity.list_since(since)
        created = await self._requests.created_since(since)
        by_status = await self._requests.count_by_status()
        follow_ups = await self._follow_ups.count_by_status()

        buckets = {
            first_day + timedelta(days=i): DailyMetric(date=_label(first_day + timedelta(days=i)))
            for i in range(WINDOW_DAYS)
        }
        for entry in activities:
            metric = buckets.get(ensure_utc(entry.created_at).date())
            if metric is None:
                continue
            metric.interactions += 1
            if entry.activity_type == ActivityType.FORM_SUBMITTED.value:
                metric.form_submissions += 1
        for created_at in created:
            metric = buckets.get(ensure_utc(created_at).date())
            if metric is not None:
                metric.new_vendors += 1

        total = sum(by_status.values())
        validated = by_status.get(VendorStatus.VALIDATED.value, 0)
        interactions = sum(m.interactions for m in buckets.values())
        stats = OverallStats(
            total_vendors=total,
            requested_vendors=by_status.get(VendorStatus.REQUESTED.value, 0),
            validated_vendors=validated,
            pending_vendors=sum(by_status.get(s, 0) for s in PENDING_STATUSES),
            denied_vendors=by_status.get(VendorStatus.DENIED.value, 0),
            total_interactions_last_7_days=interactions,
            avg_daily_interactions=round(interactions / WINDOW_DAYS, 1),
            active_rate=round(validated * 100 / total) if total else 0,
            total_follow_ups=sum(follow_ups.values()),
            unresolved_follow_ups=sum(follow_ups.get(s, 0) for s in UNRESOLVED_FOLLOW_UP_STATUSES),
        )
        return VendorAnalytics(
            daily_metrics=list(buckets.values()),
            overall_stats=stats,
            status_breakdown=by_status,
        )
