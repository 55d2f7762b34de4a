"""SQLAlchemy ORM models for follow-ups, their templates, and AI generation history."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.enums import FollowUpStatus
from app.domain.mixins import CreatedAtMixin, TimestampMixin


def _uuid() -> str:
    return str(uuid.uuid4())


class FollowUp(Base, CreatedAtMixin):
    """One outbound corrective communication tied to an onboarding."""

    __tablename__ = "follow_ups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    follow_up_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    fields_concerned: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Procurement username, or "SYSTEM" for automatic follow-ups
    initiated_by: Mapped[str] = mapped_column(String(100), nullable=False)
    is_automatic: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # SENT | PENDING | RESOLVED
    status: Mapped[str] = mapped_column(
        String(20), default=FollowUpStatus.SENT.value, nullable=False, index=True
    )

    # Escalation: starts at 0, grows along a (onboarding, type) chain
    escalation_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    escalated_to: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    escalated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Tracking
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # AI generation metadata
    ai_generated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ai_model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ai_prompt_version: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    was_edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    onboarding: Mapped["VendorOnboarding"] = relationship(lazy="selectin")

    @property
    def is_unresolved(self) -> bool:
        return self.status != FollowUpStatus.RESOLVED.value


class FollowUpTemplate(Base, TimestampMixin):
    """Message body per (follow_up_type, escalation_level) with ``{{variable}}`` placeholders."""

    __tablename__ = "follow_up_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    template_name: Mapped[str] = mapped_column(String(100), nullable=False)
    follow_up_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    escalation_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    subject_template: Mapped[str] = mapped_column(Text, nullable=False)
    body_template: Mapped[str] = mapped_column(Text, nullable=False)
    use_ai_enhancement: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    ai_system_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    available_variables: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)


class AIMessageHistory(Base, CreatedAtMixin):
    """Audit row for every generation attempt, kept whether or not the model answered."""

    __tablename__ = "ai_message_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    follow_up_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("follow_ups.id", ondelete="SET NULL"), nullable=True, index=True
    )
    onboarding_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    template_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    ai_generated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ai_model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ai_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    context_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generated_message: Mapped[str] = mapped_column(Text, nullable=False)
    tokens_used: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    was_edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edited_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
