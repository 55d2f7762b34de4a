"""Onboarding repository."""

from __future__ import annotations

from app.domain.onboarding import VendorOnboarding
from app.repositories.base import BaseRepository


class OnboardingRepository(BaseRepository[VendorOnboarding]):
    model = VendorOnboarding

    async def get_by_request_id(self, vendor_request_id: str) -> VendorOnboarding | None:
        return await self._first(
            self._base_query().where(VendorOnboarding.vendor_request_id == vendor_request_id)
        )
