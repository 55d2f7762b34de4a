"""Unresponsive-vendor scan and the daily scheduler."""

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from app.db.base import session_scope
from app.domain.enums import FollowUpType, NotificationType
from app.domain.follow_up import FollowUp
from app.domain.notification import Notification
from app.services.factory import build_services
from app.services.monitor import MonitorScheduler, UnresponsiveVendorMonitor


async def _vendor_with_follow_ups(session_factory, email, clock, request_data, clean_submission, address, count):
    async with session_scope(session_factory) as session:
        services = build_services(session, email=email, clock=clock)
        await services.templates.seed_defaults()
        request = await services.requests.create_vendor_request(request_data(address), "buyer1")
        result = await services.onboarding.submit(request.invitation_token, clean_submission())
        for n in range(count):
            await services.follow_ups.create_manual_follow_up(
                result.onboarding.id, FollowUpType.MISSING_DATA, f"reminder {n}", None, "buyer1"
            )
        return result.onboarding.id


async def _notifications(session_factory, type_):
    async with session_factory() as session:
        rows = await session.execute(select(Notification).where(Notification.type == type_.value))
        return list(rows.scalars().all())


@pytest.fixture
def monitor(session_factory, email, clock):
    return UnresponsiveVendorMonitor(
        session_factory, clock=clock, email=email, threshold_days=3, min_follow_ups=2, auto_escalate=False
    )


async def test_only_vendors_with_enough_stale_follow_ups_are_flagged(
    session_factory, email, clock, request_data, clean_submission, monitor
):
    # B: one follow-up, ten days old. A: three follow-ups, five days old.
    await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "b@vendor.example.com", 1
    )
    clock.advance(days=5)
    a = await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "a@vendor.example.com", 3
    )
    clock.advance(days=5)

    summary = await monitor.run_unresponsive_scan()

    assert summary.candidates == 1
    assert summary.notified == 1
    assert summary.failed == 0
    assert summary.notified_onboarding_ids == [a]
    [notification] = await _notifications(session_factory, NotificationType.VENDOR_UNRESPONSIVE)
    assert notification.recipient_username == "buyer1"
    assert "3 follow-up(s) sent with no response for 5 days" in notification.message


async def test_recent_follow_ups_are_not_flagged(
    session_factory, email, clock, request_data, clean_submission, monitor
):
    await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "a@vendor.example.com", 3
    )
    clock.advance(days=2)

    summary = await monitor.run_unresponsive_scan()

    assert summary.candidates == 0
    assert await _notifications(session_factory, NotificationType.VENDOR_UNRESPONSIVE) == []


async def test_resolved_follow_ups_do_not_count(
    session_factory, email, clock, request_data, clean_submission, monitor
):
    onboarding_id = await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "a@vendor.example.com", 2
    )
    async with session_scope(session_factory) as session:
        services = build_services(session, email=email, clock=clock)
        [latest, *_] = await services.follow_ups.list_for_onboarding(onboarding_id)
        await services.follow_ups.resolve_follow_up(latest.id)
    clock.advance(days=5)

    assert (await monitor.run_unresponsive_scan()).candidates == 0


async def test_one_failing_vendor_does_not_stop_the_scan(
    session_factory, email, clock, request_data, clean_submission, monitor, monkeypatch
):
    await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "a@vendor.example.com", 2
    )
    await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "b@vendor.example.com", 2
    )
    clock.advance(days=5)

    original = monitor._process
    calls = []

    async def flaky(session, onboarding_id, now):
        calls.append(onboarding_id)
        if len(calls) == 1:
            raise RuntimeError("database hiccup")
        return await original(session, onboarding_id, now)

    monkeypatch.setattr(monitor, "_process", flaky)

    summary = await monitor.run_unresponsive_scan()

    assert summary.candidates == 2
    assert summary.failed == 1
    assert summary.notified == 1


async def test_auto_escalation_creates_delayed_response(
    session_factory, email, clock, request_data, clean_submission
):
    onboarding_id = await _vendor_with_follow_ups(
        session_factory, email, clock, request_data, clean_submission, "a@vendor.example.com", 2
    )
    clock.advance(days=4)
    monitor = UnresponsiveVendorMonitor(
        session_factory, clock=clock, email=email, threshold_days=3, min_follow_ups=2, auto_escalate=True
    )

    summary = await monitor.run_unresponsive_scan()

    assert summary.escalated == 1
    async with session_factory() as session:
        rows = await session.execute(
            select(FollowUp)
            .where(FollowUp.onboarding_id == onboarding_id)
            .where(FollowUp.follow_up_type == FollowUpType.DELAYED_RESPONSE.value)
        )
        [escalated] = rows.scalars().all()
    assert escalated.is_automatic
    assert escalated.escalation_level == 1
    assert "Several requests about your onboarding remain unanswered" in escalated.message


class TestScheduler:
    def test_next_run_later_today(self, clock):
        scheduler = MonitorScheduler(None, clock=clock, hour=18, minute=30)
        assert scheduler.next_run_after(clock.now()) == datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc)

    def test_next_run_tomorrow_when_time_has_passed(self, clock):
        scheduler = MonitorScheduler(None, clock=clock, hour=9, minute=0)
        assert scheduler.next_run_after(clock.now()) == datetime(2026, 3, 3, 9, 0, tzinfo=timezone.utc)

    async def test_tick_swallows_scan_failure(self, clock):
        class Broken:
            async def run_unresponsive_scan(self):
                raise RuntimeError("boom")

        assert await MonitorScheduler(Broken(), clock=clock).tick() is None

    async def test_start_and_stop(self, clock):
        class Idle:
            async def run_unresponsive_scan(self):
                return None

        scheduler = MonitorScheduler(Idle(), clock=clock, hour=18, minute=0)
        scheduler.start()
        await asyncio.sleep(0)
        assert scheduler.is_running

        await scheduler.stop(timeout=1)
        assert not scheduler.is_running
