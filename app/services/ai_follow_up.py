"""AI-assisted follow-ups with template fallback, escalation and generation history.

Generation never fails the caller: if the generator is absent, disabled for
the template, or raises, the template is rendered instead. Every attempt is
recorded in ``AIMessageHistory`` whether or not the model answered.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationInputError
from app.domain.enums import FollowUpStatus, FollowUpType, IssueStatus
from app.domain.follow_up import AIMessageHistory, FollowUp
from app.domain.onboarding import VendorOnboarding
from app.domain.validation import ValidationIssue
from app.repositories.follow_up import AIMessageHistoryRepository
from app.repositories.validation_issue import ValidationIssueRepository
from app.services.follow_up import FollowUpService
from app.services.message_generator import DEFAULT_SYSTEM_PROMPT, MessageGenerator
from app.services.templates import TemplateService

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30


@dataclass
class GeneratedFollowUpMessage:
    message: str
    subject: str
    ai_generated: bool
    model: Optional[str]
    tokens_used: Optional[int]
    template_id: str
    history_id: str
    escalation_level: int


@dataclass
class AIUsageStats:
    total_messages_generated: int
    ai_generated_count: int
    average_tokens_used: float
    edited_messages_count: int
    average_rating: float
    edit_rate: float


def build_ai_context(onboarding: VendorOnboarding, issues: Sequence[ValidationIssue]) -> str:
    request = onboarding.vendor_request
    parts = [
        "Vendor Information:\n",
        f"Name: {request.vendor_name or 'N/A'}\n",
        f"Email: {request.vendor_email or 'N/A'}\n",
        f"Contact: {request.contact_person or 'N/A'}\n",
    ]
    if issues:
        parts.append("\nValidation Issues:\n")
        for n, issue in enumerate(issues, start=1):
            parts.append(f"{n}. {issue.field_name} ({issue.severity}): {issue.error_message}\n")
    return "".join(parts)


class AIFollowUpService:
    def __init__(
        self,
        session: AsyncSession,
        templates: TemplateService,
        follow_ups: FollowUpService,
        generator: MessageGenerator | None = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._templates = templates
        self._follow_ups = follow_ups
        self._generator = generator
        self._history = AIMessageHistoryRepository(session)
        self._issues = ValidationIssueRepository(session)
        self._clock = clock

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_message(
        self,
        onboarding_id: str,
        follow_up_type: FollowUpType,
        escalation_level: int = 0,
        issues: Optional[Sequence[ValidationIssue]] = None,
    ) -> GeneratedFollowUpMessage:
        """Generate (or render) a message without creating a follow-up."""
        logger.info("Generating AI message for onboarding: %s, type: %s", onboarding_id, follow_up_type.value)
        onboarding = await self._follow_ups.get_onboarding(onboarding_id)
        if issues is None:
            issues = await self._issues.list_by_onboarding(onboarding.id, IssueStatus.OPEN.value)

        template = await self._templates.get_template(follow_up_type, escalation_level)
        prompt = template.ai_system_prompt or DEFAULT_SYSTEM_PROMPT
        context = build_ai_context(onboarding, issues)

        message = None
        model = None
        tokens = None
        if self._generator is not None and template.use_ai_enhancement:
            try:
                generated = await self._generator.generate(prompt, context)
            except Exception as exc:
                logger.error("AI generation failed, falling back to template: %s", exc)
            else:
                message, model, tokens = generated.text, generated.model, generated.tokens_used
                logger.info("AI message generated successfully. Tokens used: %s", tokens)
        else:
            logger.info("AI disabled or template opted out, using template only")

        ai_generated = message is not None
        if message is None:
            message = self._templates.render_template(template, onboarding, issues)

        history = await self._history.create(
            onboarding_id=onboarding.id,
            template_id=template.id,
            ai_generated=ai_generated,
            ai_model=model,
            ai_prompt=prompt,
            context_data=json.dumps(
                {"context": context, "followUpType": follow_up_type.value, "escalationLevel": escalation_level}
            ),
            generated_message=message,
            tokens_used=tokens,
            created_at=self._clock.now(),
        )
        return GeneratedFollowUpMessage(
            message=message,
            subject=self._templates.render_subject(template, onboarding, issues),
            ai_generated=ai_generated,
            model=model,
            tokens_used=tokens,
            template_id=template.id,
            history_id=history.id,
            escalation_level=escalation_level,
        )

    async def create_ai_follow_up(
        self,
        onboarding_id: str,
        follow_up_type: FollowUpType,
        escalation_level: Optional[int],
        actor: str,
        issues: Optional[Sequence[ValidationIssue]] = None,
        fields_concerned: Optional[str] = None,
    ) -> FollowUp:
        """Create a PENDING follow-up whose message comes from the generator or template.

        ``escalation_level=None`` continues the (onboarding, type) chain at its
        current level; a level below that raises ValidationInputError.
        """
        logger.info("Creating AI follow-up for onboarding: %s", onboarding_id)
        onboarding = await self._follow_ups.get_onboarding(onboarding_id)
        current = await self._follow_ups.chain_level(onboarding.id, follow_up_type)
        if escalation_level is None:
            escalation_level = current
        if escalation_level < 0:
            raise ValidationInputError("Escalation level must be zero or greater")
        if escalation_level < current:
            raise ValidationInputError(
                f"Escalation level {escalation_level} is below the current level {current} "
                f"for {follow_up_type.value} follow-ups"
            )

        if issues is None:
            issues = await self._issues.list_by_onboarding(onboarding.id, IssueStatus.OPEN.value)
        generated = await self.generate_message(onboarding.id, follow_up_type, escalation_level, issues)
        if fields_concerned is None:
            fields_concerned = ", ".join(i.field_name for i in issues if i.field_name) or None

        follow_up = await self._follow_ups.create_pending(
            onboarding,
            follow_up_type,
            generated.message,
            fields_concerned,
            actor=actor,
            escalation_level=escalation_level,
            ai_generated=generated.ai_generated,
            ai_model=generated.model,
            ai_prompt_version=settings.ai_prompt_version,
        )
        history = await self._get_history(generated.history_id)
        history.follow_up_id = follow_up.id
        await self._session.flush()
        logger.info("AI follow-up created with ID: %s", follow_up.id)
        return follow_up

    async def escalate_follow_up(self, follow_up_id: str, actor: str) -> FollowUp:
        """Open the next level of the chain and point the previous follow-up at it."""
        previous = await self._follow_ups.get_follow_up(follow_up_id)
        if previous.status == FollowUpStatus.RESOLVED.value:
            raise ConflictError(f"Follow-up '{follow_up_id}' is already resolved")

        follow_up_type = FollowUpType(previous.follow_up_type)
        current = await self._follow_ups.chain_level(previous.onboarding_id, follow_up_type)
        next_level = max(current, previous.escalation_level) + 1
        escalated = await self.create_ai_follow_up(
            previous.onboarding_id,
            follow_up_type,
            next_level,
            actor,
            fields_concerned=previous.fields_concerned,
        )
        previous.escalated_at = self._clock.now()
        previous.escalated_to = escalated.id
        await self._session.flush()
        logger.info("Follow-up %s escalated to level %d (%s)", follow_up_id, next_level, escalated.id)
        return escalated

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def _get_history(self, history_id: str) -> AIMessageHistory:
        history = await self._history.get_by_id(history_id)
        if history is None:
            raise NotFoundError("AI message history", history_id)
        return history

    async def history_for_follow_up(self, follow_up_id: str) -> list[AIMessageHistory]:
        await self._follow_ups.get_follow_up(follow_up_id)
        return await self._history.list_by_follow_up(follow_up_id)

    async def mark_message_edited(self, history_id: str, edited_message: str) -> AIMessageHistory:
        logger.info("Marking AI message as edited: %s", history_id)
        history = await self._get_history(history_id)
        history.was_edited = True
        history.edited_message = edited_message
        if history.follow_up_id is not None:
            await self._follow_ups.update_message(history.follow_up_id, edited_message)
        await self._session.flush()
        return history

    async def rate_message(
        self, history_id: str, rating: int, feedback: Optional[str] = None
    ) -> AIMessageHistory:
        if not 1 <= rating <= 5:
            raise ValidationInputError("Rating must be between 1 and 5")
        logger.info("Rating AI message: %s with rating: %d", history_id, rating)
        history = await self._get_history(history_id)
        history.user_rating = rating
        history.feedback = feedback
        if history.follow_up_id is not None:
            follow_up = await self._follow_ups.get_follow_up(history.follow_up_id)
            follow_up.rating = rating
        await self._session.flush()
        return history

    async def usage_stats(self) -> AIUsageStats:
        since = self._clock.now() - timedelta(days=STATS_WINDOW_DAYS)
        rows = await self._history.list_since(since)
        total = len(rows)
        tokens = [r.tokens_used for r in rows if r.tokens_used is not None]
        ratings = [r.user_rating for r in rows if r.user_rating is not None]
        edited = sum(1 for r in rows if r.was_edited)
        return AIUsageStats(
            total_messages_generated=total,
            ai_generated_count=sum(1 for r in rows if r.ai_generated),
            average_tokens_used=sum(tokens) / len(tokens) if tokens else 0.0,
            edited_messages_count=edited,
            average_rating=sum(ratings) / len(ratings) if ratings else 0.0,
            edit_rate=edited / total * 100 if total else 0.0,
        )
