"""Notification repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update

from app.domain.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def list_for_recipient(
        self, recipient: str, *, unread_only: bool = False
    ) -> list[Notification]:
        q = self._base_query().where(Notification.recipient_username == recipient)
        if unread_only:
            q = q.where(Notification.is_read.is_(False))
        return await self._all(q.order_by(Notification.created_at.desc()))

    async def list_for_request(self, vendor_request_id: str) -> list[Notification]:
        q = (
            self._base_query()
            .where(Notification.vendor_request_id == vendor_request_id)
            .order_by(Notification.created_at.desc())
        )
        return await self._all(q)

    async def count_unread(self, recipient: str) -> int:
        q = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_username == recipient)
            .where(Notification.is_read.is_(False))
        )
        return (await self._session.execute(q)).scalar_one()

    async def mark_all_read(self, recipient: str, read_at: datetime) -> int:
        result = await self._session.execute(
            update(Notification)
            .where(Notification.recipient_username == recipient)
            .where(Notification.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount
