"""Dashboard analytics: status breakdown, daily buckets, overall stats."""

from app.domain.enums import FollowUpType, VendorStatus


async def test_analytics_snapshot(services, create_request, clean_submission, clock):
    await create_request("a@vendor.example.com")
    clock.advance(days=1)
    b = await create_request("b@vendor.example.com")
    result = await services.onboarding.submit(b.invitation_token, clean_submission())
    c = await create_request("c@vendor.example.com")
    await services.requests.soft_delete(c.id, "buyer1")
    await services.follow_ups.create_manual_follow_up(
        result.onboarding.id, FollowUpType.MANUAL, "Please confirm", None, "buyer1"
    )

    analytics = await services.analytics.vendor_analytics()

    assert analytics.status_breakdown == {
        VendorStatus.REQUESTED.value: 1,
        VendorStatus.AWAITING_VALIDATION.value: 1,
    }
    days = analytics.daily_metrics
    assert [d.date for d in days] == [
        "Feb 25", "Feb 26", "Feb 27", "Feb 28", "Mar 1", "Mar 2", "Mar 3",
    ]
    assert [d.new_vendors for d in days[-2:]] == [1, 2]
    assert days[-1].form_submissions == 1
    assert sum(d.interactions for d in days[:-2]) == 0

    stats = analytics.overall_stats
    logged = len(await services.activity_log.recent(500))
    assert stats.total_interactions_last_7_days == logged
    assert stats.avg_daily_interactions == round(logged / 7, 1)
    assert stats.total_vendors == 2
    assert stats.requested_vendors == 1
    assert stats.pending_vendors == 1
    assert stats.validated_vendors == 0
    assert stats.active_rate == 0
    assert stats.total_follow_ups == 1
    assert stats.unresolved_follow_ups == 1


async def test_active_rate_and_resolved_follow_ups(services, submitted_onboarding):
    onboarding = await submitted_onboarding()
    follow_up = await services.follow_ups.create_manual_follow_up(
        onboarding.id, FollowUpType.MANUAL, "hello", None, "buyer1"
    )
    await services.follow_ups.resolve_follow_up(follow_up.id)
    await services.requests.transition(onboarding.vendor_request_id, VendorStatus.VALIDATED, "buyer1")

    stats = (await services.analytics.vendor_analytics()).overall_stats

    assert stats.validated_vendors == 1
    assert stats.active_rate == 100
    assert stats.total_follow_ups == 1
    assert stats.unresolved_follow_ups == 0


async def test_empty_database(services):
    analytics = await services.analytics.vendor_analytics()

    assert analytics.status_breakdown == {}
    assert len(analytics.daily_metrics) == 7
    assert analytics.overall_stats.total_vendors == 0
    assert analytics.overall_stats.active_rate == 0
