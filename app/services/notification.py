"""Procurement-facing notifications.

Writes go into the caller's session inside a SAVEPOINT: a failed insert is
logged and dropped without breaking the surrounding unit of work, and a
rolled-back unit takes its notifications with it.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.exceptions import NotFoundError
from app.domain.enums import NotificationType
from app.domain.notification import Notification
from app.domain.vendor import VendorRequest
from app.repositories.notification import NotificationRepository

logger = logging.getLogger(__name__)


def _vendor_url(request: VendorRequest) -> str:
    return f"/vendors/{request.id}"


class NotificationService:
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._session = session
        self._repo = NotificationRepository(session)
        self._clock = clock

    # ------------------------------------------------------------------
    # Sink
    # ------------------------------------------------------------------

    async def notify(
        self,
        recipient: str,
        type: NotificationType,
        title: str,
        message: str,
        vendor_request_id: Optional[str] = None,
        action_url: Optional[str] = None,
    ) -> Notification | None:
        """Best-effort insert; returns None when the write failed."""
        notification = Notification(
            recipient_username=recipient,
            type=type.value,
            title=title,
            message=message,
            vendor_request_id=vendor_request_id,
            action_url=action_url,
            created_at=self._clock.now(),
        )
        try:
            async with self._session.begin_nested():
                self._session.add(notification)
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to create %s notification for %s: %s", type.value, recipient, exc
            )
            return None
        logger.info("Notification created for user %s: %s", recipient, title)
        return notification

    # ------------------------------------------------------------------
    # Workflow helpers
    # ------------------------------------------------------------------

    async def notify_request_created(self, request: VendorRequest) -> Notification | None:
        return await self.notify(
            request.created_by,
            NotificationType.VENDOR_REQUEST_CREATED,
            "Vendor Request Created",
            f"New vendor request from {request.vendor_name} ({request.vendor_email})",
            request.id,
            _vendor_url(request),
        )

    async def notify_form_submitted(self, request: VendorRequest) -> Notification | None:
        return await self.notify(
            request.created_by,
            NotificationType.FORM_SUBMITTED,
            "Form Submitted",
            f"Vendor {request.vendor_name} has submitted the onboarding form",
            request.id,
            _vendor_url(request),
        )

    async def notify_status_changed(
        self, request: VendorRequest, old_status: str, new_status: str
    ) -> Notification | None:
        return await self.notify(
            request.created_by,
            NotificationType.STATUS_CHANGED,
            "Status Changed",
            f"Vendor {request.vendor_name} status changed from "
            f"{old_status} to {new_status}",
            request.id,
            _vendor_url(request),
        )

    async def notify_validation_pending(self, request: VendorRequest) -> Notification | None:
        return await self.notify(
            request.created_by,
            NotificationType.VALIDATION_PENDING,
            "Validation Required",
            f"Vendor {request.vendor_name} is awaiting validation. Please review.",
            request.id,
            _vendor_url(request),
        )

    async def notify_missing_data(self, request: VendorRequest, fields: str) -> Notification | None:
        return await self.notify(
            request.created_by,
            NotificationType.MISSING_DATA,
            "Missing Data",
            f"Vendor {request.vendor_name} has missing data: {fields}",
            request.id,
            _vendor_url(request),
        )

    async def notify_vendor_unresponsive(
        self, request: VendorRequest, unresolved_count: int, days_since_last: int
    ) -> Notification | None:
        notification = await self.notify(
            request.created_by,
            NotificationType.VENDOR_UNRESPONSIVE,
            "Vendor Unresponsive - Action Required",
            f"Vendor {request.vendor_name} has been unresponsive. "
            f"{unresolved_count} follow-up(s) sent with no response for "
            f"{days_since_last} days. Please review and take appropriate action.",
            request.id,
            _vendor_url(request),
        )
        logger.warning(
            "Vendor unresponsive notification sent for vendor: %s with %d unresolved follow-ups",
            request.vendor_name,
            unresolved_count,
        )
        return notification

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_for_user(self, username: str) -> list[Notification]:
        return await self._repo.list_for_recipient(username)

    async def list_unread(self, username: str) -> list[Notification]:
        return await self._repo.list_for_recipient(username, unread_only=True)

    async def count_unread(self, username: str) -> int:
        return await self._repo.count_unread(username)

    async def mark_read(self, notification_id: str) -> Notification:
        notification = await self._repo.get_by_id(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = self._clock.now()
            await self._session.flush()
        return notification

    async def mark_all_read(self, username: str) -> int:
        return await self._repo.mark_all_read(username, self._clock.now())
