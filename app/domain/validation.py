"""SQLAlchemy ORM model for validation issues (one failed rule against one field)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import IssueStatus, Severity
from app.domain.mixins import CreatedAtMixin


class ValidationIssue(Base, CreatedAtMixin):
    """Never deleted: an OPEN issue is either resolved or stays visible."""

    __tablename__ = "validation_issues"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # IssueType value, or the rule name when a rule does not classify
    issue_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    field_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    field_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    current_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expected_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    validation_rule: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    suggestion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    severity: Mapped[str] = mapped_column(
        String(20), default=Severity.MEDIUM.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=IssueStatus.OPEN.value, nullable=False, index=True
    )

    resolved_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.status == IssueStatus.OPEN.value
