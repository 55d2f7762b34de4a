"""Vendor request service: invitations and the onboarding status state machine.

Status transitions are deliberately unguarded: any status may replace any
other. Every transition writes the status, an activity-log row and the
status notifications in the caller's unit of work.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, ensure_utc, system_clock
from app.core.config import settings
from app.core.exceptions import ConflictError, InvitationExpiredError, NotFoundError, parse_enum
from app.core.pagination import PaginationParams
from app.domain.enums import ActivityType, VendorStatus
from app.domain.vendor import VendorRequest
from app.repositories.vendor_request import VendorRequestRepository
from app.schemas.vendor import VendorRequestCreate
from app.services.activity_log import ActivityLogService
from app.services.dispatch import enqueue
from app.services.email import EmailService
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)

_ACTIVITY_FOR_STATUS = {
    VendorStatus.VALIDATED: ActivityType.VENDOR_APPROVED,
    VendorStatus.DENIED: ActivityType.VENDOR_DENIED,
    VendorStatus.DELETED: ActivityType.VENDOR_DELETED,
}


class VendorRequestService:
    def __init__(
        self,
        session: AsyncSession,
        notifications: NotificationService,
        activity_log: ActivityLogService,
        email: EmailService | None = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._repo = VendorRequestRepository(session)
        self._notifications = notifications
        self._activity = activity_log
        self._email = email or EmailService()
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_requests(
        self, pagination: PaginationParams, status: Optional[str] = None
    ) -> tuple[list[VendorRequest], int]:
        """Active (non-deleted) requests, optionally filtered by status."""
        filters = {"status": parse_enum(VendorStatus, status, "status").value} if status else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def list_deleted(self) -> list[VendorRequest]:
        return await self._repo.list_deleted()

    async def get_request(self, request_id: str, *, include_deleted: bool = True) -> VendorRequest:
        request = await self._repo.get_by_id(request_id, include_deleted=include_deleted)
        if request is None:
            raise NotFoundError("Vendor request", request_id)
        return request

    async def get_by_email(self, email: str) -> VendorRequest:
        request = await self._repo.get_by_email(email)
        if request is None:
            raise NotFoundError("Vendor request", email)
        return request

    async def get_by_token(self, token: str) -> VendorRequest:
        """Resolve an invitation token; expired tokens raise InvitationExpiredError."""
        request = await self._repo.get_by_token(token)
        if request is None:
            raise NotFoundError("Invitation")
        expires_at = ensure_utc(request.invitation_expires_at)
        if expires_at is not None and expires_at < self._clock.now():
            raise InvitationExpiredError()
        return request

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def create_vendor_request(self, data: VendorRequestCreate, actor: str) -> VendorRequest:
        email = str(data.vendor_email).lower()
        if await self._repo.get_by_email(email) is not None:
            raise ConflictError("Vendor with this email already exists")

        now = self._clock.now()
        request = await self._repo.create(
            vendor_name=data.vendor_name,
            vendor_email=email,
            contact_person=data.contact_person,
            contact_number=data.contact_number,
            vendor_category=data.vendor_category,
            remarks=data.remarks,
            status=VendorStatus.REQUESTED.value,
            invitation_token=str(uuid.uuid4()),
            invitation_sent_at=now,
            invitation_expires_at=now + timedelta(days=settings.invitation_expiry_days),
            created_by=actor,
            created_at=now,
            updated_at=now,
        )

        await self._activity.log(
            request.id,
            ActivityType.VENDOR_REQUEST_CREATED,
            actor,
            f"Vendor request created by {actor}",
            new_status=request.status,
            details={
                "vendorName": request.vendor_name,
                "vendorEmail": request.vendor_email,
                "vendorCategory": request.vendor_category,
            },
        )
        await self._notifications.notify_request_created(request)
        self._send_invitation(request)
        await self._activity.log(
            request.id,
            ActivityType.INVITATION_SENT,
            actor,
            f"Invitation email sent to {request.vendor_email}",
            details={"expiresAt": request.invitation_expires_at.isoformat()},
        )
        logger.info("Vendor request created for: %s", request.vendor_email)
        return request

    async def resend_invitation(self, request_id: str, actor: str) -> VendorRequest:
        """Rotate the token, push expiry out again and re-send the invitation."""
        request = await self.get_request(request_id)
        now = self._clock.now()
        request.invitation_token = str(uuid.uuid4())
        request.invitation_sent_at = now
        request.invitation_expires_at = now + timedelta(days=settings.invitation_expiry_days)
        await self._repo.save(request)

        self._send_invitation(request)
        await self._activity.log(
            request.id,
            ActivityType.INVITATION_RESENT,
            actor,
            f"Invitation re-sent to {request.vendor_email}",
            details={"expiresAt": request.invitation_expires_at.isoformat()},
        )
        logger.info("Invitation resent for vendor request: %s", request_id)
        return request

    async def open_invitation(self, token: str, actor: str = "vendor") -> VendorRequest:
        """Vendor opened the link: REQUESTED moves to AWAITING_RESPONSE."""
        request = await self.get_by_token(token)
        await self._activity.log(request.id, ActivityType.LINK_OPENED, actor, "Invitation link opened")
        if request.status == VendorStatus.REQUESTED.value:
            request = await self.transition(request.id, VendorStatus.AWAITING_RESPONSE, actor)
        return request

    def _send_invitation(self, request: VendorRequest) -> None:
        email = self._email
        to_email, vendor_name, token = request.vendor_email, request.vendor_name, request.invitation_token

        async def _send() -> None:
            await email.send_invitation(to_email, vendor_name, token)

        enqueue(self._session, _send, label=f"invitation:{request.id}")

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def transition(
        self, request_id: str, target: VendorStatus | str, actor: str
    ) -> VendorRequest:
        """Overwrite the request status and emit the matching side effects.

        Entering DELETED stamps ``deleted_at``. Leaving DELETED is a restore:
        the timestamp is cleared and the status is forced to REQUESTED.
        """
        target = parse_enum(VendorStatus, target, "status")
        request = await self.get_request(request_id)
        old_status = request.status

        if old_status == VendorStatus.DELETED.value and target != VendorStatus.DELETED:
            new_status = VendorStatus.REQUESTED
            request.deleted_at = None
            activity = ActivityType.VENDOR_RESTORED
        else:
            new_status = target
            if target == VendorStatus.DELETED and request.deleted_at is None:
                request.deleted_at = self._clock.now()
            activity = _ACTIVITY_FOR_STATUS.get(target, ActivityType.STATUS_UPDATED)

        request.status = new_status.value
        await self._repo.save(request)

        await self._activity.log(
            request.id,
            activity,
            actor,
            f"Status changed from {old_status} to {new_status.value}",
            old_status=old_status,
            new_status=new_status.value,
        )
        await self._notifications.notify_status_changed(request, old_status, new_status.value)
        if new_status == VendorStatus.AWAITING_VALIDATION:
            await self._notifications.notify_validation_pending(request)

        logger.info("Vendor request %s status updated to: %s", request_id, new_status.value)
        return request

    async def soft_delete(self, request_id: str, actor: str) -> VendorRequest:
        request = await self.transition(request_id, VendorStatus.DELETED, actor)
        logger.info("Vendor request %s soft deleted", request_id)
        return request

    async def restore(self, request_id: str, actor: str) -> VendorRequest:
        request = await self.get_request(request_id)
        if request.deleted_at is None:
            raise ConflictError("Vendor request is not deleted")
        request = await self.transition(request_id, VendorStatus.REQUESTED, actor)
        logger.info("Vendor request %s restored", request_id)
        return request
