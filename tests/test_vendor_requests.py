"""Invitations, the status state machine, soft delete and restore."""

import pytest

from app.core.exceptions import (
    ConflictError,
    InvitationExpiredError,
    NotFoundError,
    ValidationInputError,
)
from app.domain.enums import ActivityType, NotificationType, VendorStatus
from app.services.dispatch import pending_messages


class TestCreate:
    async def test_new_request_is_invited(self, services, session, create_request, clock):
        request = await create_request()

        assert request.status == VendorStatus.REQUESTED.value
        assert request.created_by == "buyer1"
        assert request.invitation_token
        assert (request.invitation_expires_at - clock.now()).days == 7
        assert pending_messages(session) == [f"invitation:{request.id}"]

        activity = [a.activity_type for a in await services.activity_log.for_request(request.id)]
        assert set(activity) == {
            ActivityType.VENDOR_REQUEST_CREATED.value,
            ActivityType.INVITATION_SENT.value,
        }
        [notification] = await services.notifications.list_for_user("buyer1")
        assert notification.type == NotificationType.VENDOR_REQUEST_CREATED.value

    async def test_email_is_unique_case_insensitively(self, create_request):
        await create_request("sales@acme.example.com")
        with pytest.raises(ConflictError):
            await create_request("SALES@acme.example.com")

    async def test_deleted_request_still_blocks_email(self, services, create_request):
        request = await create_request()
        await services.requests.soft_delete(request.id, "buyer1")
        with pytest.raises(ConflictError):
            await create_request()


class TestInvitationToken:
    async def test_open_moves_to_awaiting_response(self, services, create_request):
        request = await create_request()
        opened = await services.requests.open_invitation(request.invitation_token)
        assert opened.status == VendorStatus.AWAITING_RESPONSE.value

    async def test_open_later_does_not_rewind_status(self, services, create_request):
        request = await create_request()
        await services.requests.transition(request.id, VendorStatus.MISSING_DATA, "buyer1")
        opened = await services.requests.open_invitation(request.invitation_token)
        assert opened.status == VendorStatus.MISSING_DATA.value

    async def test_unknown_token(self, services):
        with pytest.raises(NotFoundError):
            await services.requests.get_by_token("nope")

    async def test_expired_token(self, services, create_request, clock):
        request = await create_request()
        clock.advance(days=8)
        with pytest.raises(InvitationExpiredError):
            await services.requests.get_by_token(request.invitation_token)

    async def test_resend_rotates_token(self, services, create_request, clock):
        request = await create_request()
        old_token = request.invitation_token
        clock.advance(days=8)

        resent = await services.requests.resend_invitation(request.id, "buyer1")

        assert resent.invitation_token != old_token
        assert await services.requests.get_by_token(resent.invitation_token) is resent
        with pytest.raises(NotFoundError):
            await services.requests.get_by_token(old_token)


class TestStateMachine:
    async def test_any_status_can_follow_any_other(self, services, create_request):
        request = await create_request()
        for target in (VendorStatus.VALIDATED, VendorStatus.AWAITING_RESPONSE, VendorStatus.DENIED):
            request = await services.requests.transition(request.id, target, "buyer1")
            assert request.status == target.value

    async def test_status_change_is_logged_and_notified(self, services, create_request, clock):
        request = await create_request()
        clock.advance(minutes=1)
        await services.requests.transition(request.id, "validated", "buyer2")

        [latest, *_] = await services.activity_log.for_request(request.id)
        assert latest.activity_type == ActivityType.VENDOR_APPROVED.value
        assert latest.performed_by == "buyer2"
        assert (latest.old_status, latest.new_status) == ("REQUESTED", "VALIDATED")

        messages = [n.message for n in await services.notifications.list_for_user("buyer1")]
        assert "Vendor Acme Ltd status changed from REQUESTED to VALIDATED" in messages

    async def test_awaiting_validation_also_notifies_pending(self, services, create_request):
        request = await create_request()
        await services.requests.transition(request.id, VendorStatus.AWAITING_VALIDATION, "buyer1")
        types = {n.type for n in await services.notifications.list_for_user("buyer1")}
        assert NotificationType.VALIDATION_PENDING.value in types

    async def test_unknown_status(self, services, create_request):
        request = await create_request()
        with pytest.raises(ValidationInputError):
            await services.requests.transition(request.id, "ARCHIVED", "buyer1")

    async def test_unknown_request(self, services):
        with pytest.raises(NotFoundError):
            await services.requests.transition("missing", VendorStatus.VALIDATED, "buyer1")


class TestSoftDelete:
    async def test_delete_hides_from_active_listing(self, services, create_request, clock):
        request = await create_request()
        deleted = await services.requests.soft_delete(request.id, "buyer1")

        assert deleted.status == VendorStatus.DELETED.value
        assert deleted.deleted_at == clock.now()
        assert [r.id for r in await services.requests.list_deleted()] == [request.id]
        assert (await services.requests.get_request(request.id)).id == request.id

    async def test_leaving_deleted_always_restores_to_requested(self, services, create_request, clock):
        request = await create_request()
        await services.requests.soft_delete(request.id, "buyer1")
        clock.advance(minutes=1)

        restored = await services.requests.transition(request.id, VendorStatus.VALIDATED, "buyer1")

        assert restored.status == VendorStatus.REQUESTED.value
        assert restored.deleted_at is None
        [latest, *_] = await services.activity_log.for_request(request.id)
        assert latest.activity_type == ActivityType.VENDOR_RESTORED.value

    async def test_restore_requires_deleted(self, services, create_request):
        request = await create_request()
        with pytest.raises(ConflictError):
            await services.requests.restore(request.id, "buyer1")

        await services.requests.soft_delete(request.id, "buyer1")
        assert (await services.requests.restore(request.id, "buyer1")).status == VendorStatus.REQUESTED.value
