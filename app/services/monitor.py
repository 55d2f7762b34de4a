"""Unresponsive-vendor monitor and its daily scheduler.

``UnresponsiveVendorMonitor.run_unresponsive_scan`` is the single implementation behind
both the daily job and the on-demand endpoint. Each vendor is processed in
its own unit of work; one failing vendor is logged and the scan moves on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.clock import Clock, ensure_utc, system_clock
from app.core.config import settings
from app.core.exceptions import NotFoundError, TemplateNotFoundError
from app.db.base import session_scope
from app.domain.enums import FollowUpType
from app.domain.follow_up import FollowUp
from app.repositories.follow_up import FollowUpRepository
from app.repositories.onboarding import OnboardingRepository
from app.services.email import EmailService
from app.services.factory import build_services

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    scanned_at: datetime
    threshold: datetime
    candidates: int = 0
    notified: int = 0
    escalated: int = 0
    failed: int = 0
    notified_onboarding_ids: list[str] = field(default_factory=list)


class UnresponsiveVendorMonitor:
    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        *,
        clock: Clock = system_clock,
        email: EmailService | None = None,
        threshold_days: Optional[int] = None,
        min_follow_ups: Optional[int] = None,
        auto_escalate: Optional[bool] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._email = email
        self.threshold_days = (
            settings.unresponsive_threshold_days if threshold_days is None else threshold_days
        )
        self.min_follow_ups = (
            settings.unresponsive_min_follow_ups if min_follow_ups is None else min_follow_ups
        )
        self.auto_escalate = (
            settings.unresponsive_auto_escalate if auto_escalate is None else auto_escalate
        )

    async def run_unresponsive_scan(self) -> ScanSummary:
        """Notify procurement about every vendor with enough stale unresolved follow-ups."""
        now = self._clock.now()
        threshold = now - timedelta(days=self.threshold_days)
        summary = ScanSummary(scanned_at=now, threshold=threshold)
        logger.info("Starting scheduled check for unresponsive vendors (threshold %s)", threshold)

        async with session_scope(self._session_factory) as session:
            onboarding_ids = await FollowUpRepository(session).find_unresponsive_onboarding_ids(
                threshold, self.min_follow_ups
            )
        summary.candidates = len(onboarding_ids)
        logger.info("Found %d potentially unresponsive vendor(s)", summary.candidates)

        for onboarding_id in onboarding_ids:
            try:
                async with session_scope(self._session_factory) as session:
                    notified, escalated = await self._process(session, onboarding_id, now)
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "Error processing unresponsive vendor for onboarding %s: %s",
                    onboarding_id,
                    exc,
                    exc_info=True,
                )
                continue
            if notified:
                summary.notified += 1
                summary.notified_onboarding_ids.append(onboarding_id)
            else:
                summary.failed += 1
            if escalated:
                summary.escalated += 1

        logger.info(
            "Completed unresponsive vendor check: %d candidate(s), %d notified, %d failed",
            summary.candidates,
            summary.notified,
            summary.failed,
        )
        return summary

    async def _process(self, session: AsyncSession, onboarding_id: str, now: datetime) -> tuple[bool, bool]:
        onboarding = await OnboardingRepository(session).get_by_id(onboarding_id)
        if onboarding is None or onboarding.vendor_request is None:
            raise NotFoundError("Vendor request for onboarding", onboarding_id)
        request = onboarding.vendor_request

        follow_up_repo = FollowUpRepository(session)
        unresolved = await follow_up_repo.count_unresolved(onboarding_id)
        latest = await follow_up_repo.latest_for_onboarding(onboarding_id)
        if latest is None:
            raise NotFoundError("Follow-up for onboarding", onboarding_id)
        days_since = (now - ensure_utc(latest.created_at)).days

        services = build_services(session, email=self._email, clock=self._clock)
        notification = await services.notifications.notify_vendor_unresponsive(
            request, unresolved, days_since
        )

        escalated = None
        if self.auto_escalate:
            escalated = await self._escalate(services, onboarding, latest)
        return notification is not None, escalated is not None

    async def _escalate(self, services, onboarding, latest: FollowUp) -> FollowUp:
        follow_up_type = FollowUpType.DELAYED_RESPONSE
        level = max(
            latest.escalation_level + 1,
            await services.follow_ups.chain_level(onboarding.id, follow_up_type),
        )
        try:
            template = await services.templates.get_template(follow_up_type, level)
            issues = await services.validation.get_open_issues(onboarding.id)
            message = services.templates.render_template(template, onboarding, issues)
        except TemplateNotFoundError:
            logger.warning("No DELAYED_RESPONSE template; sending the default reminder")
            message = (
                "We have not received a response to our previous follow-ups regarding your "
                "onboarding. Please review your submission at your earliest convenience."
            )
        return await services.follow_ups.create_automatic_follow_up(
            onboarding, follow_up_type, message, latest.fields_concerned, escalation_level=level
        )


class MonitorScheduler:
    """Runs ``monitor.run_unresponsive_scan`` once a day at a fixed UTC wall-clock time."""

    def __init__(
        self,
        monitor: UnresponsiveVendorMonitor,
        *,
        clock: Clock = system_clock,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
    ):
        self._monitor = monitor
        self._clock = clock
        self.hour = settings.unresponsive_check_hour if hour is None else hour
        self.minute = settings.unresponsive_check_minute if minute is None else minute
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    def next_run_after(self, now: datetime) -> datetime:
        candidate = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    async def tick(self) -> ScanSummary | None:
        """Run one scan now; a failing scan is logged and reported as None."""
        try:
            return await self._monitor.run_unresponsive_scan()
        except Exception:
            logger.exception("Unresponsive vendor scan failed")
            return None

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="unresponsive-vendor-monitor")
        logger.info(
            "Unresponsive vendor scheduler started (daily at %02d:%02d UTC)", self.hour, self.minute
        )

    async def stop(self, timeout: float = 30.0) -> None:
        """Signal stop; a scan already in progress is allowed to finish."""
        self._stop_event.set()
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Scheduler did not stop within %.0fs; cancelling", timeout)
                self._task.cancel()
            self._task = None
        logger.info("Unresponsive vendor scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            now = self._clock.now()
            delay = (self.next_run_after(now) - now).total_seconds()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                await self.tick()
