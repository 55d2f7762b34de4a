"""Vendor request repository: lookups by email and invitation token."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select

from app.domain.vendor import VendorRequest
from app.repositories.base import BaseRepository


class VendorRequestRepository(BaseRepository[VendorRequest]):
    model = VendorRequest

    async def get_by_email(
        self, email: str, *, include_deleted: bool = True
    ) -> VendorRequest | None:
        # Uniqueness spans deleted rows too, hence include_deleted by default
        return await self._first(
            self._base_query(include_deleted).where(VendorRequest.vendor_email == email)
        )

    async def get_by_token(self, token: str) -> VendorRequest | None:
        return await self._first(
            self._base_query().where(VendorRequest.invitation_token == token)
        )

    async def list_deleted(self) -> list[VendorRequest]:
        q = (
            self._base_query(include_deleted=True)
            .where(VendorRequest.deleted_at.is_not(None))
            .order_by(VendorRequest.deleted_at.desc())
        )
        return await self._all(q)

    async def count_by_status(self) -> dict[str, int]:
        """Active (non-deleted) requests per status."""
        q = (
            select(VendorRequest.status, func.count())
            .where(VendorRequest.deleted_at.is_(None))
            .group_by(VendorRequest.status)
        )
        return {status: count for status, count in (await self._session.execute(q)).all()}

    async def created_since(self, since: datetime) -> list[datetime]:
        q = select(VendorRequest.created_at).where(VendorRequest.created_at >= since)
        return list((await self._session.execute(q)).scalars().all())
