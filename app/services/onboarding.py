"""Onboarding submission: store the vendor's data, validate it, drive the status.

Rule: No FastAPI here. One call to ``submit`` is one unit of work: the
onboarding rows, new issues, follow-ups, status change and notifications are
committed together by the caller's session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.exceptions import NotFoundError
from app.domain.enums import ActivityType, VendorStatus
from app.domain.follow_up import FollowUp
from app.domain.onboarding import (
    VendorBankingDetails,
    VendorBusinessDetails,
    VendorComplianceDetails,
    VendorContactDetails,
    VendorOnboarding,
)
from app.domain.validation import ValidationIssue
from app.repositories.onboarding import OnboardingRepository
from app.schemas.onboarding import OnboardingSubmit
from app.services.activity_log import ActivityLogService
from app.services.follow_up import FollowUpService
from app.services.notification import NotificationService
from app.services.validation import ValidationService
from app.services.vendor_request import VendorRequestService

logger = logging.getLogger(__name__)

# attribute on VendorOnboarding -> detail model
_AGGREGATES = {
    "business_details": VendorBusinessDetails,
    "contact_details": VendorContactDetails,
    "banking_details": VendorBankingDetails,
    "compliance_details": VendorComplianceDetails,
}


@dataclass
class SubmissionResult:
    onboarding: VendorOnboarding
    status: VendorStatus
    issues: list[ValidationIssue] = field(default_factory=list)
    follow_ups: list[FollowUp] = field(default_factory=list)


class OnboardingService:
    def __init__(
        self,
        session: AsyncSession,
        requests: VendorRequestService,
        validation: ValidationService,
        follow_ups: FollowUpService,
        notifications: NotificationService,
        activity_log: ActivityLogService,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._repo = OnboardingRepository(session)
        self._requests = requests
        self._validation = validation
        self._follow_ups = follow_ups
        self._notifications = notifications
        self._activity = activity_log
        self._clock = clock

    async def get(self, onboarding_id: str) -> VendorOnboarding:
        onboarding = await self._repo.get_by_id(onboarding_id)
        if onboarding is None:
            raise NotFoundError("Vendor onboarding", onboarding_id)
        return onboarding

    async def get_for_request(self, request_id: str) -> VendorOnboarding:
        onboarding = await self._repo.get_by_request_id(request_id)
        if onboarding is None:
            raise NotFoundError("Vendor onboarding for request", request_id)
        return onboarding

    async def get_for_token(self, token: str) -> VendorOnboarding:
        request = await self._requests.get_by_token(token)
        return await self.get_for_request(request.id)

    async def submit(self, token: str, data: OnboardingSubmit, actor: str = "vendor") -> SubmissionResult:
        """Create or update the onboarding, validate it, raise follow-ups, set the status."""
        request = await self._requests.get_by_token(token)
        onboarding = await self._store(request.id, request, data)

        await self._follow_ups.mark_responded(onboarding.id)
        await self._activity.log(
            request.id,
            ActivityType.FORM_SUBMITTED,
            actor,
            "Onboarding form submitted",
            details={"onboardingId": onboarding.id},
        )
        await self._notifications.notify_form_submitted(request)

        issues = await self._validation.validate(onboarding)
        follow_ups = await self._validation.auto_trigger_follow_up(onboarding, issues)
        business_follow_ups = await self._validation.validate_business_rules(onboarding)
        follow_ups.extend(business_follow_ups)

        if issues or business_follow_ups:
            target = VendorStatus.MISSING_DATA
            fields = ", ".join(f.fields_concerned for f in follow_ups if f.fields_concerned)
            await self._notifications.notify_missing_data(request, fields)
        else:
            target = VendorStatus.AWAITING_VALIDATION
        await self._requests.transition(request.id, target, actor)

        logger.info(
            "Onboarding %s submitted: %d issue(s), %d follow-up(s), status %s",
            onboarding.id,
            len(issues),
            len(follow_ups),
            target.value,
        )
        return SubmissionResult(onboarding=onboarding, status=target, issues=issues, follow_ups=follow_ups)

    async def revalidate(self, onboarding_id: str) -> list[ValidationIssue]:
        """Run the rule evaluator again and follow up on anything new."""
        onboarding = await self.get(onboarding_id)
        issues = await self._validation.validate(onboarding)
        await self._validation.auto_trigger_follow_up(onboarding, issues)
        return issues

    async def _store(self, request_id: str, request, data: OnboardingSubmit) -> VendorOnboarding:
        now = self._clock.now()
        onboarding = await self._repo.get_by_request_id(request_id)

        if onboarding is None:
            onboarding = VendorOnboarding(
                vendor_request=request,
                is_complete=True,
                submitted_at=now,
                last_submitted_at=now,
                created_at=now,
                updated_at=now,
            )
            for attr, model in _AGGREGATES.items():
                incoming = getattr(data, attr)
                setattr(onboarding, attr, model(**incoming.model_dump()) if incoming else None)
            await self._repo.add(onboarding)
            logger.info("Created onboarding %s for vendor request %s", onboarding.id, request_id)
            return onboarding

        for attr, model in _AGGREGATES.items():
            incoming = getattr(data, attr)
            if incoming is None:
                continue
            existing = getattr(onboarding, attr)
            if existing is None:
                setattr(onboarding, attr, model(**incoming.model_dump()))
            else:
                for key, value in incoming.model_dump().items():
                    setattr(existing, key, value)
        if onboarding.submitted_at is None:
            onboarding.submitted_at = now
        onboarding.is_complete = True
        onboarding.last_submitted_at = now
        await self._repo.save(onboarding)
        logger.info("Updated onboarding %s for vendor request %s", onboarding.id, request_id)
        return onboarding
