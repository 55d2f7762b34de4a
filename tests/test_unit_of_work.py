"""Commit releases queued email; rollback drops it along with notifications."""

from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.db.base import session_scope
from app.domain.enums import NotificationType
from app.domain.notification import Notification
from app.services.dispatch import wait_for_dispatch
from app.services.factory import build_services


async def _count_notifications(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(Notification))).scalar_one()


async def test_commit_sends_invitation(session_factory, email, clock, request_data):
    async with session_scope(session_factory) as session:
        services = build_services(session, email=email, clock=clock)
        request = await services.requests.create_vendor_request(request_data(), "buyer1")
        assert email.invitations == []

    await wait_for_dispatch(timeout=5)
    assert email.invitations == [("sales@acme.example.com", "Acme Ltd", request.invitation_token)]


async def test_rollback_discards_email_and_notifications(session_factory, email, clock, request_data):
    try:
        async with session_scope(session_factory) as session:
            services = build_services(session, email=email, clock=clock)
            await services.requests.create_vendor_request(request_data(), "buyer1")
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    await wait_for_dispatch(timeout=5)
    assert email.invitations == []
    assert await _count_notifications(session_factory) == 0


async def test_failed_notification_does_not_break_the_unit(session_factory, email, clock, request_data):
    async with session_scope(session_factory) as session:
        services = build_services(session, email=email, clock=clock)
        request = await services.requests.create_vendor_request(request_data(), "buyer1")

        with patch.object(session, "add", side_effect=SQLAlchemyError("disk full")):
            result = await services.notifications.notify(
                "buyer1", NotificationType.STATUS_CHANGED, "t", "m", request.id
            )
        assert result is None

    # The request and its creation notification survive
    assert await _count_notifications(session_factory) == 1


async def test_failing_email_transport_is_logged_not_raised(session_factory, clock, request_data, caplog):
    class BrokenEmail:
        async def send_invitation(self, *args):
            raise ConnectionError("smtp down")

    async with session_scope(session_factory) as session:
        services = build_services(session, email=BrokenEmail(), clock=clock)
        await services.requests.create_vendor_request(request_data(), "buyer1")

    await wait_for_dispatch(timeout=5)
    assert "Background dispatch" in caplog.text
