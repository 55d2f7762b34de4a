"""Append-only vendor activity log."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.domain.activity_log import VendorActivityLog
from app.domain.enums import ActivityType
from app.repositories.activity_log import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityLogService:
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._session = session
        self._repo = ActivityLogRepository(session)
        self._clock = clock

    async def log(
        self,
        vendor_request_id: str,
        activity_type: ActivityType,
        actor: str,
        description: Optional[str] = None,
        *,
        old_status: Optional[str] = None,
        new_status: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> VendorActivityLog | None:
        """Record one activity. Failures are logged; the caller's unit carries on."""
        entry = VendorActivityLog(
            vendor_request_id=vendor_request_id,
            activity_type=activity_type.value,
            performed_by=actor,
            description=description,
            old_status=old_status,
            new_status=new_status,
            details=details,
            created_at=self._clock.now(),
        )
        try:
            async with self._session.begin_nested():
                self._session.add(entry)
        except SQLAlchemyError as exc:
            logger.error(
                "Error logging activity for vendor %s: %s", vendor_request_id, exc
            )
            return None
        logger.info("Activity logged for vendor %s: %s", vendor_request_id, activity_type.value)
        return entry

    async def for_request(self, vendor_request_id: str) -> list[VendorActivityLog]:
        return await self._repo.list_for_request(vendor_request_id)

    async def recent(self, limit: int = 50) -> list[VendorActivityLog]:
        return await self._repo.list_recent(limit)
