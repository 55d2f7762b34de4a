"""Follow-up, validation issue, template and AI history schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.domain.enums import FollowUpType
from app.schemas.common import CamelModel


class ValidationIssueOut(CamelModel):
    id: str
    onboarding_id: str
    issue_type: str
    field_name: str | None = None
    field_path: str | None = None
    current_value: str | None = None
    expected_value: str | None = None
    validation_rule: str | None = None
    error_message: str | None = None
    suggestion: str | None = None
    severity: str
    status: str
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    resolution_notes: str | None = None
    created_at: datetime


class IssueResolve(CamelModel):
    notes: str | None = None


class BulkIssueResolve(CamelModel):
    issue_ids: list[str] = Field(min_length=1)
    notes: str | None = None


class BulkResolveResult(CamelModel):
    resolved: int
    requested: int


class IssueCounts(CamelModel):
    open: int
    critical: int


class FollowUpCreate(CamelModel):
    follow_up_type: FollowUpType
    message: str = Field(min_length=1)
    fields_concerned: str | None = None


class FollowUpMessageUpdate(CamelModel):
    message: str = Field(min_length=1)


class FollowUpOut(CamelModel):
    id: str
    onboarding_id: str
    follow_up_type: str
    message: str
    fields_concerned: str | None = None
    initiated_by: str
    is_automatic: bool
    status: str
    escalation_level: int
    escalated_to: str | None = None
    escalated_at: datetime | None = None
    sent_at: datetime | None = None
    read_at: datetime | None = None
    responded_at: datetime | None = None
    resolved_at: datetime | None = None
    ai_generated: bool
    ai_model: str | None = None
    ai_prompt_version: str | None = None
    was_edited: bool
    rating: int | None = None
    created_at: datetime


class TemplateCreate(CamelModel):
    template_name: str = Field(min_length=1, max_length=100)
    follow_up_type: FollowUpType
    escalation_level: int = Field(default=0, ge=0)
    subject_template: str = Field(min_length=1)
    body_template: str = Field(min_length=1)
    use_ai_enhancement: bool = True
    ai_system_prompt: str | None = None


class TemplateUpdate(CamelModel):
    template_name: str | None = None
    subject_template: str | None = None
    body_template: str | None = None
    use_ai_enhancement: bool | None = None
    ai_system_prompt: str | None = None
    is_active: bool | None = None


class TemplateOut(CamelModel):
    id: str
    template_name: str
    follow_up_type: str
    escalation_level: int
    subject_template: str
    body_template: str
    use_ai_enhancement: bool
    ai_system_prompt: str | None = None
    available_variables: str | None = None
    created_by: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TemplatePreviewRequest(CamelModel):
    onboarding_id: str


class TemplatePreview(CamelModel):
    subject: str
    body: str


class AIGenerateRequest(CamelModel):
    onboarding_id: str
    follow_up_type: FollowUpType
    escalation_level: int = Field(default=0, ge=0)


class AIFollowUpCreate(CamelModel):
    onboarding_id: str
    follow_up_type: FollowUpType
    # Omitted: continue the chain at its current level
    escalation_level: int | None = Field(default=None, ge=0)
    fields_concerned: str | None = None


class GeneratedMessageOut(CamelModel):
    message: str
    subject: str
    ai_generated: bool
    model: str | None = None
    tokens_used: int | None = None
    template_id: str
    history_id: str
    escalation_level: int


class AIMessageEdit(CamelModel):
    edited_message: str = Field(min_length=1)


class AIMessageRating(CamelModel):
    rating: int
    feedback: str | None = None


class AIMessageHistoryOut(CamelModel):
    id: str
    follow_up_id: str | None = None
    onboarding_id: str | None = None
    template_id: str | None = None
    ai_generated: bool
    ai_model: str | None = None
    generated_message: str
    tokens_used: int | None = None
    was_edited: bool
    edited_message: str | None = None
    user_rating: int | None = None
    feedback: str | None = None
    created_at: datetime


class AIUsageStatsOut(CamelModel):
    total_messages_generated: int
    ai_generated_count: int
    average_tokens_used: float
    edited_messages_count: int
    average_rating: float
    edit_rate: float
