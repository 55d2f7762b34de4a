"""Validation issue repository."""

from __future__ import annotations

from sqlalchemy import func, select

from app.domain.enums import IssueStatus, Severity
from app.domain.validation import ValidationIssue
from app.repositories.base import BaseRepository


class ValidationIssueRepository(BaseRepository[ValidationIssue]):
    model = ValidationIssue

    async def list_by_onboarding(
        self, onboarding_id: str, status: str | None = None
    ) -> list[ValidationIssue]:
        q = self._base_query().where(ValidationIssue.onboarding_id == onboarding_id)
        if status is not None:
            q = q.where(ValidationIssue.status == status)
        return await self._all(q.order_by(ValidationIssue.created_at.desc()))

    async def count_open(self, onboarding_id: str, *, critical_only: bool = False) -> int:
        q = (
            select(func.count())
            .select_from(ValidationIssue)
            .where(ValidationIssue.onboarding_id == onboarding_id)
            .where(ValidationIssue.status == IssueStatus.OPEN.value)
        )
        if critical_only:
            q = q.where(ValidationIssue.severity == Severity.CRITICAL.value)
        return (await self._session.execute(q)).scalar_one()
