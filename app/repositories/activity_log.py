"""Activity log repository (append and read only)."""

from __future__ import annotations

from datetime import datetime

from app.domain.activity_log import VendorActivityLog
from app.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[VendorActivityLog]):
    model = VendorActivityLog

    async def list_for_request(self, vendor_request_id: str) -> list[VendorActivityLog]:
        q = (
            self._base_query()
            .where(VendorActivityLog.vendor_request_id == vendor_request_id)
            .order_by(VendorActivityLog.created_at.desc())
        )
        return await self._all(q)

    async def list_recent(self, limit: int = 50) -> list[VendorActivityLog]:
        q = self._base_query().order_by(VendorActivityLog.created_at.desc()).limit(limit)
        return await self._all(q)

    async def list_since(self, since: datetime) -> list[VendorActivityLog]:
        q = self._base_query().where(VendorActivityLog.created_at >= since)
        return await self._all(q.order_by(VendorActivityLog.created_at))
