"""Follow-up templates: lookup with escalation fallback, rendering, CRUD and defaults.

Templates are plain text with ``{{variableName}}`` placeholders. Rendering is
a single substitution pass; unknown names render as an empty string.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.config import settings
from app.core.exceptions import NotFoundError, TemplateNotFoundError, ValidationInputError
from app.domain.enums import FollowUpType, IssueType, Severity
from app.domain.follow_up import FollowUpTemplate
from app.domain.onboarding import VendorOnboarding
from app.domain.validation import ValidationIssue
from app.repositories.follow_up import FollowUpTemplateRepository

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)

TEMPLATE_VARIABLES = (
    "vendorName",
    "vendorEmail",
    "contactPerson",
    "contactNumber",
    "missingFields",
    "incorrectFields",
    "issueCount",
    "criticalIssueCount",
    "issueList",
    "currentDate",
    "companyName",
    "supportEmail",
    "portalUrl",
)


def render(text: str, variables: Mapping[str, Any]) -> str:
    """Substitute every ``{{name}}`` in *text* in one pass."""

    def _replace(match: re.Match) -> str:
        value = variables.get(match.group(1).strip())
        return "" if value is None else str(value)

    return PLACEHOLDER.sub(_replace, text)


def build_variable_map(
    onboarding: VendorOnboarding,
    issues: Iterable[ValidationIssue] = (),
    *,
    clock: Clock = system_clock,
) -> dict[str, str]:
    request = onboarding.vendor_request
    issues = list(issues)

    missing = [i.field_name or "" for i in issues if i.issue_type == IssueType.MISSING_DATA.value]
    incorrect = [
        i.field_name or "" for i in issues if i.issue_type == IssueType.INCORRECT_DATA.value
    ]
    critical = sum(1 for i in issues if i.severity == Severity.CRITICAL.value)
    issue_list = "\n".join(
        f"{n}. {i.field_name}: {i.error_message}" for n, i in enumerate(issues, start=1)
    )

    return {
        "vendorName": request.vendor_name or "",
        "vendorEmail": request.vendor_email or "",
        "contactPerson": request.contact_person or "",
        "contactNumber": request.contact_number or "",
        "missingFields": "\n".join(missing),
        "incorrectFields": "\n".join(incorrect),
        "issueCount": str(len(issues)),
        "criticalIssueCount": str(critical),
        "issueList": issue_list,
        "currentDate": clock.today().isoformat(),
        "companyName": settings.company_name,
        "supportEmail": settings.support_email,
        "portalUrl": settings.vendor_portal_url,
    }


_AI_PROMPT = (
    "You are a procurement specialist. Write a {tone} follow-up email body asking "
    "the vendor to fix the listed onboarding issues."
)

DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "template_name": "Missing Data - Initial",
        "follow_up_type": FollowUpType.MISSING_DATA.value,
        "escalation_level": 0,
        "subject_template": "Action needed: missing onboarding information for {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "Thank you for starting your onboarding with {{companyName}}. "
            "The following information is still missing:\n\n{{missingFields}}\n\n"
            "Please update your submission at {{portalUrl}}.\n\n"
            "Questions? Contact {{supportEmail}}."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="friendly"),
    },
    {
        "template_name": "Missing Data - Reminder",
        "follow_up_type": FollowUpType.MISSING_DATA.value,
        "escalation_level": 1,
        "subject_template": "Reminder: onboarding for {{vendorName}} is incomplete",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "We are still waiting for the following information "
            "({{issueCount}} open item(s)):\n\n{{issueList}}\n\n"
            "Please complete your submission at {{portalUrl}} as soon as possible."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="firm"),
    },
    {
        "template_name": "Missing Data - Final Notice",
        "follow_up_type": FollowUpType.MISSING_DATA.value,
        "escalation_level": 2,
        "subject_template": "Final notice: onboarding for {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "This is a final notice. Your onboarding cannot proceed until the "
            "following items are resolved:\n\n{{issueList}}\n\n"
            "If we do not hear from you, your vendor request may be closed. "
            "Contact {{supportEmail}} if you need help."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="urgent"),
    },
    {
        "template_name": "Incorrect Data - Initial",
        "follow_up_type": FollowUpType.INCORRECT_DATA.value,
        "escalation_level": 0,
        "subject_template": "Please correct your onboarding information, {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "Some of the information you submitted could not be validated:\n\n"
            "{{issueList}}\n\n"
            "Please review and correct these fields at {{portalUrl}}."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="friendly"),
    },
    {
        "template_name": "Incorrect Data - Reminder",
        "follow_up_type": FollowUpType.INCORRECT_DATA.value,
        "escalation_level": 1,
        "subject_template": "Reminder: corrections needed for {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "The following fields still need correction:\n\n{{incorrectFields}}\n\n"
            "Please update them at {{portalUrl}}."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="firm"),
    },
    {
        "template_name": "Expired Document",
        "follow_up_type": FollowUpType.EXPIRED_DOCUMENT.value,
        "escalation_level": 0,
        "subject_template": "Expired documents on file for {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "One or more of your compliance documents have expired:\n\n{{issueList}}\n\n"
            "Please upload current documents at {{portalUrl}}."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="polite"),
    },
    {
        "template_name": "Delayed Response - Reminder",
        "follow_up_type": FollowUpType.DELAYED_RESPONSE.value,
        "escalation_level": 0,
        "subject_template": "We haven't heard back from {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "We sent you a request regarding your onboarding and have not received "
            "a response yet. Please visit {{portalUrl}} to continue.\n\n"
            "Contact {{supportEmail}} if anything is unclear."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="polite"),
    },
    {
        "template_name": "Delayed Response - Escalation",
        "follow_up_type": FollowUpType.DELAYED_RESPONSE.value,
        "escalation_level": 1,
        "subject_template": "Urgent: response required from {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "Several requests about your onboarding remain unanswered. "
            "Open items:\n\n{{issueList}}\n\n"
            "Please respond by visiting {{portalUrl}} or contacting {{supportEmail}}."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="urgent"),
    },
    {
        "template_name": "Unresponsive Vendor",
        "follow_up_type": FollowUpType.UNRESPONSIVE.value,
        "escalation_level": 0,
        "subject_template": "Onboarding on hold: {{vendorName}}",
        "body_template": (
            "Dear {{contactPerson}},\n\n"
            "Your onboarding with {{companyName}} is on hold because we have not "
            "received a response to our previous messages.\n\n"
            "Please contact {{supportEmail}} to continue."
        ),
        "ai_system_prompt": _AI_PROMPT.format(tone="formal"),
    },
]

_EDITABLE_FIELDS = (
    "template_name",
    "subject_template",
    "body_template",
    "use_ai_enhancement",
    "ai_system_prompt",
    "available_variables",
    "is_active",
)


class TemplateService:
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._repo = FollowUpTemplateRepository(session)
        self._clock = clock

    async def get_template(
        self, follow_up_type: FollowUpType | str, escalation_level: int = 0
    ) -> FollowUpTemplate:
        """Template for the level, else the type's level-0 template."""
        type_value = getattr(follow_up_type, "value", follow_up_type)
        logger.info(
            "Fetching template for type: %s, escalation level: %d", type_value, escalation_level
        )
        template = await self._repo.find_active(type_value, escalation_level)
        if template is None and escalation_level > 0:
            logger.warning("Escalation template not found, falling back to base template")
            template = await self._repo.find_active(type_value, 0)
        if template is None:
            raise TemplateNotFoundError(type_value)
        return template

    def variables(
        self, onboarding: VendorOnboarding, issues: Iterable[ValidationIssue] = ()
    ) -> dict[str, str]:
        return build_variable_map(onboarding, issues, clock=self._clock)

    def render_template(
        self,
        template: FollowUpTemplate,
        onboarding: VendorOnboarding,
        issues: Iterable[ValidationIssue] = (),
    ) -> str:
        logger.info("Rendering template: %s for onboarding: %s", template.template_name, onboarding.id)
        return render(template.body_template, self.variables(onboarding, issues))

    def render_subject(
        self,
        template: FollowUpTemplate,
        onboarding: VendorOnboarding,
        issues: Iterable[ValidationIssue] = (),
    ) -> str:
        return render(template.subject_template, self.variables(onboarding, issues))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_active(self) -> list[FollowUpTemplate]:
        return await self._repo.list_active()

    async def list_by_type(self, follow_up_type: FollowUpType) -> list[FollowUpTemplate]:
        return await self._repo.list_active(follow_up_type.value)

    async def get(self, template_id: str) -> FollowUpTemplate:
        template = await self._repo.get_by_id(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return template

    async def create(self, data: Mapping[str, Any], actor: Optional[str] = None) -> FollowUpTemplate:
        values = dict(data)
        level = values.get("escalation_level", 0) or 0
        if level < 0:
            raise ValidationInputError("Escalation level must be zero or greater")
        values["escalation_level"] = level
        values["follow_up_type"] = getattr(values["follow_up_type"], "value", values["follow_up_type"])
        values.setdefault("available_variables", ", ".join(TEMPLATE_VARIABLES))
        template = await self._repo.create(created_by=actor, **values)
        logger.info("Saved template: %s", template.template_name)
        return template

    async def update(self, template_id: str, data: Mapping[str, Any]) -> FollowUpTemplate:
        template = await self.get(template_id)
        for key, value in data.items():
            if key in _EDITABLE_FIELDS and value is not None:
                setattr(template, key, value)
        await self._repo.save(template)
        logger.info("Updated template: %s", template.template_name)
        return template

    async def deactivate(self, template_id: str) -> FollowUpTemplate:
        logger.info("Deactivating template: %s", template_id)
        template = await self.get(template_id)
        template.is_active = False
        await self._repo.save(template)
        return template

    async def seed_defaults(self) -> int:
        """Insert the built-in templates when the table is empty. Returns rows added."""
        if await self._repo.count_all() > 0:
            return 0
        for spec in DEFAULT_TEMPLATES:
            await self._repo.create(
                created_by="SYSTEM",
                available_variables=", ".join(TEMPLATE_VARIABLES),
                **spec,
            )
        logger.info("Seeded %d default follow-up templates", len(DEFAULT_TEMPLATES))
        return len(DEFAULT_TEMPLATES)
