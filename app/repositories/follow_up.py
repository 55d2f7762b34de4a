"""Follow-up, template and AI history repositories."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select

from app.domain.enums import UNRESOLVED_FOLLOW_UP_STATUSES
from app.domain.follow_up import AIMessageHistory, FollowUp, FollowUpTemplate
from app.repositories.base import BaseRepository


class FollowUpRepository(BaseRepository[FollowUp]):
    model = FollowUp

    async def list_by_onboarding(self, onboarding_id: str) -> list[FollowUp]:
        q = (
            self._base_query()
            .where(FollowUp.onboarding_id == onboarding_id)
            .order_by(FollowUp.created_at.desc())
        )
        return await self._all(q)

    async def list_filtered(
        self, *, status: str | None = None, follow_up_type: str | None = None
    ) -> list[FollowUp]:
        q = self._base_query()
        if status is not None:
            q = q.where(FollowUp.status == status)
        if follow_up_type is not None:
            q = q.where(FollowUp.follow_up_type == follow_up_type)
        return await self._all(q.order_by(FollowUp.created_at.desc()))

    async def list_unresolved(self, onboarding_id: str) -> list[FollowUp]:
        q = (
            self._base_query()
            .where(FollowUp.onboarding_id == onboarding_id)
            .where(FollowUp.status.in_(UNRESOLVED_FOLLOW_UP_STATUSES))
        )
        return await self._all(q)

    async def count_unresolved(self, onboarding_id: str) -> int:
        q = (
            select(func.count())
            .select_from(FollowUp)
            .where(FollowUp.onboarding_id == onboarding_id)
            .where(FollowUp.status.in_(UNRESOLVED_FOLLOW_UP_STATUSES))
        )
        return (await self._session.execute(q)).scalar_one()

    async def count_by_status(self) -> dict[str, int]:
        q = select(FollowUp.status, func.count()).group_by(FollowUp.status)
        return {status: count for status, count in (await self._session.execute(q)).all()}

    async def latest_for_onboarding(self, onboarding_id: str) -> FollowUp | None:
        q = (
            self._base_query()
            .where(FollowUp.onboarding_id == onboarding_id)
            .order_by(FollowUp.created_at.desc())
            .limit(1)
        )
        return await self._first(q)

    async def max_escalation_level(self, onboarding_id: str, follow_up_type: str) -> int | None:
        """Highest level used so far on the (onboarding, type) chain, None if the chain is empty."""
        q = (
            select(func.max(FollowUp.escalation_level))
            .where(FollowUp.onboarding_id == onboarding_id)
            .where(FollowUp.follow_up_type == follow_up_type)
        )
        return (await self._session.execute(q)).scalar_one_or_none()

    async def find_unresponsive_onboarding_ids(
        self, older_than: datetime, min_count: int
    ) -> list[str]:
        """Onboarding ids with at least *min_count* unresolved follow-ups created before *older_than*."""
        q = (
            select(FollowUp.onboarding_id)
            .where(FollowUp.status.in_(UNRESOLVED_FOLLOW_UP_STATUSES))
            .where(FollowUp.created_at < older_than)
            .group_by(FollowUp.onboarding_id)
            .having(func.count(FollowUp.id) >= min_count)
            .order_by(FollowUp.onboarding_id)
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())


class FollowUpTemplateRepository(BaseRepository[FollowUpTemplate]):
    model = FollowUpTemplate

    def _active(self):
        return self._base_query().where(FollowUpTemplate.is_active.is_(True))

    async def find_active(self, follow_up_type: str, escalation_level: int) -> FollowUpTemplate | None:
        q = (
            self._active()
            .where(FollowUpTemplate.follow_up_type == follow_up_type)
            .where(FollowUpTemplate.escalation_level == escalation_level)
            .order_by(FollowUpTemplate.updated_at.desc())
        )
        return await self._first(q)

    async def list_active(self, follow_up_type: str | None = None) -> list[FollowUpTemplate]:
        q = self._active()
        if follow_up_type is not None:
            q = q.where(FollowUpTemplate.follow_up_type == follow_up_type)
        q = q.order_by(FollowUpTemplate.follow_up_type, FollowUpTemplate.escalation_level)
        return await self._all(q)

    async def count_all(self) -> int:
        q = select(func.count()).select_from(FollowUpTemplate)
        return (await self._session.execute(q)).scalar_one()


class AIMessageHistoryRepository(BaseRepository[AIMessageHistory]):
    model = AIMessageHistory

    async def list_since(self, since: datetime) -> list[AIMessageHistory]:
        q = self._base_query().where(AIMessageHistory.created_at >= since)
        return await self._all(q.order_by(AIMessageHistory.created_at.desc()))

    async def list_by_follow_up(self, follow_up_id: str) -> list[AIMessageHistory]:
        q = self._base_query().where(AIMessageHistory.follow_up_id == follow_up_id)
        return await self._all(q.order_by(AIMessageHistory.created_at.desc()))
