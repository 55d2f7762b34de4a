"""Composition root: builds the service graph for one session.

Every collaborator is passed in through constructors; nothing is wired after
construction.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.services.activity_log import ActivityLogService
from app.services.analytics import AnalyticsService
from app.services.ai_follow_up import AIFollowUpService
from app.services.email import EmailService
from app.services.follow_up import FollowUpService
from app.services.message_generator import MessageGenerator
from app.services.notification import NotificationService
from app.services.onboarding import OnboardingService
from app.services.templates import TemplateService
from app.services.validation import ValidationService
from app.services.vendor_request import VendorRequestService
from app.validation.rules import ValidationRule


@dataclass
class Services:
    notifications: NotificationService
    activity_log: ActivityLogService
    requests: VendorRequestService
    follow_ups: FollowUpService
    templates: TemplateService
    validation: ValidationService
    ai: AIFollowUpService
    onboarding: OnboardingService
    analytics: AnalyticsService


def build_services(
    session: AsyncSession,
    *,
    email: EmailService | None = None,
    generator: MessageGenerator | None = None,
    clock: Clock = system_clock,
    rules: Sequence[ValidationRule] | None = None,
) -> Services:
    email = email or EmailService()
    notifications = NotificationService(session, clock)
    activity_log = ActivityLogService(session, clock)
    requests = VendorRequestService(session, notifications, activity_log, email, clock)
    follow_ups = FollowUpService(session, email, clock)
    templates = TemplateService(session, clock)
    validation = ValidationService(session, follow_ups, rules, clock)
    ai = AIFollowUpService(session, templates, follow_ups, generator, clock)
    onboarding = OnboardingService(
        session, requests, validation, follow_ups, notifications, activity_log, clock
    )
    return Services(
        notifications=notifications,
        activity_log=activity_log,
        requests=requests,
        follow_ups=follow_ups,
        templates=templates,
        validation=validation,
        ai=ai,
        onboarding=onboarding,
        analytics=AnalyticsService(session, clock),
    )
