"""Validation of submitted onboarding data.

Two passes run on every submission:

1. The rule evaluator applies each registered ``ValidationRule`` to its field
   and persists one OPEN ``ValidationIssue`` per failure. A rule that raises is
   logged and skipped; the remaining rules still run.
2. The business-rule pass inspects the detail aggregates directly and raises
   at most one follow-up for missing fields and one for invalid/expired ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.exceptions import ConflictError, NotFoundError
from app.domain.enums import FollowUpType, IssueStatus
from app.domain.follow_up import FollowUp
from app.domain.onboarding import VendorOnboarding
from app.domain.validation import ValidationIssue
from app.repositories.validation_issue import ValidationIssueRepository
from app.services.follow_up import FollowUpService
from app.validation.fields import extract_field, short_name
from app.validation.rules import ValidationRule, default_rules

logger = logging.getLogger(__name__)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class BusinessRuleFindings:
    missing: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.missing and not self.invalid


def check_business_rules(onboarding: VendorOnboarding, today: date) -> BusinessRuleFindings:
    """Collect missing expected fields and expired compliance dates."""
    findings = BusinessRuleFindings()
    missing = findings.missing

    business = onboarding.business_details
    if business is None:
        missing.append("Business Details")
    else:
        if business.year_established is None:
            missing.append("Year Established")
        if _blank(business.number_of_employees):
            missing.append("Number of Employees")
        if _blank(business.industry_sector):
            missing.append("Industry/Sector")

    contact = onboarding.contact_details
    if contact is None:
        missing.append("Contact Details")
    else:
        if _blank(contact.job_title):
            missing.append("Job Title")
        if _blank(contact.website):
            missing.append("Website")

    banking = onboarding.banking_details
    if banking is None:
        missing.append("Banking Details")
    else:
        if _blank(banking.routing_swift_code):
            missing.append("Routing/SWIFT Code")
        if _blank(banking.payment_terms):
            missing.append("Payment Terms")
        if _blank(banking.currency):
            missing.append("Currency")

    compliance = onboarding.compliance_details
    if compliance is None:
        missing.append("Compliance Details")
    else:
        expiry = compliance.license_expiry_date
        if expiry is not None and expiry < today:
            findings.invalid.append(f"Business License (Expired on {expiry.isoformat()})")
        expiry = compliance.insurance_expiry_date
        if expiry is not None and expiry < today:
            findings.invalid.append(f"Insurance Policy (Expired on {expiry.isoformat()})")

    return findings


def build_issue_message(issues: Iterable[ValidationIssue]) -> str:
    lines = ["We have identified the following issues with your submission:\n\n"]
    for issue in issues:
        lines.append(f"• {issue.field_name}: {issue.error_message}\n")
    lines.append("\nPlease review and update the information at your earliest convenience.")
    return "".join(lines)


class ValidationService:
    def __init__(
        self,
        session: AsyncSession,
        follow_ups: FollowUpService,
        rules: Sequence[ValidationRule] | None = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._repo = ValidationIssueRepository(session)
        self._follow_ups = follow_ups
        self._rules = list(rules) if rules is not None else default_rules()
        self._clock = clock

    @property
    def rules(self) -> list[ValidationRule]:
        return list(self._rules)

    # ------------------------------------------------------------------
    # Rule evaluator
    # ------------------------------------------------------------------

    async def validate(self, onboarding: VendorOnboarding) -> list[ValidationIssue]:
        """Apply every rule; persist and return one new OPEN issue per failure."""
        logger.info("Starting validation for vendor onboarding: %s", onboarding.id)
        issues: list[ValidationIssue] = []
        now = self._clock.now()

        for rule in self._rules:
            try:
                value = extract_field(onboarding, rule.field_name)
                result = rule.validate(value, onboarding)
            except Exception as exc:
                logger.error("Error validating field %s: %s", rule.field_name, exc, exc_info=True)
                continue
            if result.valid:
                continue

            issue = ValidationIssue(
                onboarding_id=onboarding.id,
                issue_type=result.issue_type.value if result.issue_type else rule.rule_name,
                field_name=short_name(rule.field_name),
                field_path=rule.field_name,
                current_value=result.current_value,
                expected_value=result.expected_value,
                error_message=result.error_message,
                suggestion=result.suggestion,
                validation_rule=rule.rule_name,
                severity=result.severity.value if result.severity else "MEDIUM",
                status=IssueStatus.OPEN.value,
                created_at=now,
            )
            self._session.add(issue)
            issues.append(issue)
            logger.debug("Validation failed for field %s: %s", rule.field_name, result.error_message)

        if issues:
            await self._session.flush()
        logger.info(
            "Validation completed. Found %d issue(s) for vendor onboarding: %s",
            len(issues),
            onboarding.id,
        )
        return issues

    async def validate_by_id(self, onboarding_id: str) -> list[ValidationIssue]:
        onboarding = await self._follow_ups.get_onboarding(onboarding_id)
        return await self.validate(onboarding)

    async def auto_trigger_follow_up(
        self, onboarding: VendorOnboarding, issues: Sequence[ValidationIssue]
    ) -> list[FollowUp]:
        """One automatic follow-up per distinct issue type, listing every affected field."""
        if not issues:
            logger.info("No validation issues found, skipping follow-up for vendor: %s", onboarding.id)
            return []

        logger.info("Auto-triggering follow-ups for %d issue(s) for vendor: %s", len(issues), onboarding.id)
        grouped: dict[str, list[ValidationIssue]] = {}
        for issue in issues:
            grouped.setdefault(issue.issue_type, []).append(issue)

        created = []
        for issue_type, group in grouped.items():
            logger.debug("Creating follow-up for issue type: %s with %d issue(s)", issue_type, len(group))
            fields = ", ".join(issue.field_name or "" for issue in group)
            created.append(
                await self._follow_ups.create_automatic_follow_up(
                    onboarding, issue_type, build_issue_message(group), fields
                )
            )
        return created

    # ------------------------------------------------------------------
    # Business-rule pass
    # ------------------------------------------------------------------

    async def validate_business_rules(self, onboarding: VendorOnboarding) -> list[FollowUp]:
        findings = check_business_rules(onboarding, self._clock.today())
        created = []

        if findings.missing:
            joined = ", ".join(findings.missing)
            message = (
                "The following required fields are missing or incomplete:\n"
                f"{joined}\n\n"
                "Please provide the missing information to complete your onboarding process."
            )
            created.append(
                await self._follow_ups.create_automatic_follow_up(
                    onboarding, FollowUpType.MISSING_DATA, message, joined
                )
            )

        if findings.invalid:
            joined = ", ".join(findings.invalid)
            message = (
                "The following fields contain invalid or expired information:\n"
                f"{joined}\n\n"
                "Please update these fields with valid information."
            )
            created.append(
                await self._follow_ups.create_automatic_follow_up(
                    onboarding, FollowUpType.INCORRECT_DATA, message, joined
                )
            )

        if findings.clean:
            logger.info("Vendor onboarding validation passed for: %s", onboarding.id)
        else:
            logger.info("Vendor onboarding validation issues found for: %s. Follow-ups created.", onboarding.id)
        return created

    # ------------------------------------------------------------------
    # Issue lifecycle
    # ------------------------------------------------------------------

    async def get_open_issues(self, onboarding_id: str) -> list[ValidationIssue]:
        return await self._repo.list_by_onboarding(onboarding_id, IssueStatus.OPEN.value)

    async def get_issues(self, onboarding_id: str) -> list[ValidationIssue]:
        return await self._repo.list_by_onboarding(onboarding_id)

    async def count_open(self, onboarding_id: str) -> int:
        return await self._repo.count_open(onboarding_id)

    async def count_critical(self, onboarding_id: str) -> int:
        return await self._repo.count_open(onboarding_id, critical_only=True)

    async def resolve_issue(
        self, issue_id: str, resolved_by: str, notes: Optional[str] = None
    ) -> ValidationIssue:
        """OPEN -> RESOLVED. Resolving twice raises ConflictError and changes nothing."""
        issue = await self._repo.get_by_id(issue_id)
        if issue is None:
            raise NotFoundError("Validation issue", issue_id)
        if not issue.is_open:
            raise ConflictError(f"Validation issue '{issue_id}' is already resolved")
        issue.status = IssueStatus.RESOLVED.value
        issue.resolved_by = resolved_by
        issue.resolution_notes = notes
        issue.resolved_at = self._clock.now()
        await self._session.flush()
        logger.info("Resolved validation issue: %s", issue_id)
        return issue

    async def resolve_bulk(
        self, issue_ids: Iterable[str], resolved_by: str, notes: Optional[str] = None
    ) -> int:
        """Resolve each id independently; unknown or already-resolved ids are skipped."""
        resolved = 0
        for issue_id in issue_ids:
            try:
                await self.resolve_issue(issue_id, resolved_by, notes)
            except (NotFoundError, ConflictError) as exc:
                logger.warning("Skipping issue %s during bulk resolve: %s", issue_id, exc.message)
                continue
            resolved += 1
        return resolved
