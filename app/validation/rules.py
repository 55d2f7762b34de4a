"""Field validation rules.

Every rule names one field, examines its value and returns a
``ValidationResult``. Failing results carry the severity and issue type the
evaluator persists on the ValidationIssue.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from app.domain.enums import IssueType, Severity
from app.domain.onboarding import VendorOnboarding

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_PATTERN = re.compile(
    r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$"
)
MIN_PHONE_DIGITS = 10


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    field_name: str
    current_value: Optional[str] = None
    expected_value: Optional[str] = None
    error_message: Optional[str] = None
    severity: Optional[Severity] = None
    issue_type: Optional[IssueType] = None
    suggestion: Optional[str] = None

    @classmethod
    def ok(cls, field_name: str, value: Any) -> "ValidationResult":
        return cls(valid=True, field_name=field_name, current_value=_as_text(value))


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ValidationRule(ABC):
    """One check against one field of an onboarding."""

    rule_name: str = "RULE"
    is_required: bool = False

    def __init__(self, field_name: str):
        self.field_name = field_name

    @abstractmethod
    def validate(self, value: Any, context: VendorOnboarding) -> ValidationResult:
        ...

    @property
    def suggestion(self) -> Optional[str]:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field_name!r})"


class MandatoryFieldRule(ValidationRule):
    rule_name = "MANDATORY_FIELD"
    is_required = True

    def __init__(self, field_name: str, display_name: str):
        super().__init__(field_name)
        self.display_name = display_name

    @property
    def suggestion(self) -> str:
        return f"Please provide {self.display_name}"

    def validate(self, value: Any, context: VendorOnboarding) -> ValidationResult:
        if not _is_blank(value):
            return ValidationResult.ok(self.field_name, value)
        return ValidationResult(
            valid=False,
            field_name=self.field_name,
            current_value=_as_text(value),
            expected_value="Non-empty value",
            error_message=f"{self.display_name} is required",
            severity=Severity.HIGH,
            issue_type=IssueType.MISSING_DATA,
            suggestion=self.suggestion,
        )


class EmailFormatRule(ValidationRule):
    rule_name = "EMAIL_FORMAT"
    is_required = True

    def __init__(self, field_name: str = "contactDetails.emailAddress"):
        super().__init__(field_name)

    @property
    def suggestion(self) -> str:
        return "Provide a valid email address in format: user@domain.com"

    def validate(self, value: Any, context: VendorOnboarding) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(
                valid=False,
                field_name=self.field_name,
                current_value=_as_text(value),
                expected_value="Valid email address",
                error_message="Email address is required",
                severity=Severity.HIGH,
                issue_type=IssueType.MISSING_DATA,
                suggestion=self.suggestion,
            )
        text = str(value).strip()
        if EMAIL_PATTERN.match(text):
            return ValidationResult.ok(self.field_name, text)
        return ValidationResult(
            valid=False,
            field_name=self.field_name,
            current_value=text,
            expected_value="user@example.com",
            error_message="Invalid email format",
            severity=Severity.HIGH,
            issue_type=IssueType.INCORRECT_DATA,
            suggestion=self.suggestion,
        )


class PhoneFormatRule(ValidationRule):
    rule_name = "PHONE_FORMAT"
    is_required = True

    def __init__(self, field_name: str = "contactDetails.phoneNumber"):
        super().__init__(field_name)

    @property
    def suggestion(self) -> str:
        return f"Provide a valid phone number (minimum {MIN_PHONE_DIGITS} digits)"

    def validate(self, value: Any, context: VendorOnboarding) -> ValidationResult:
        if _is_blank(value):
            return ValidationResult(
                valid=False,
                field_name=self.field_name,
                current_value=_as_text(value),
                expected_value="Valid phone number",
                error_message="Phone number is required",
                severity=Severity.HIGH,
                issue_type=IssueType.MISSING_DATA,
                suggestion=self.suggestion,
            )
        text = str(value).strip()
        digits = sum(ch.isdigit() for ch in text)
        if PHONE_PATTERN.match(text) and digits >= MIN_PHONE_DIGITS:
            return ValidationResult.ok(self.field_name, text)
        return ValidationResult(
            valid=False,
            field_name=self.field_name,
            current_value=text,
            expected_value="+1-234-567-8900",
            error_message="Invalid phone number format",
            severity=Severity.MEDIUM,
            issue_type=IssueType.INCORRECT_DATA,
            suggestion=self.suggestion,
        )


def default_rules() -> list[ValidationRule]:
    """Rule set applied to every submission."""
    return [
        MandatoryFieldRule("businessDetails.legalBusinessName", "Legal Business Name"),
        MandatoryFieldRule("businessDetails.businessAddress", "Business Address"),
        MandatoryFieldRule("contactDetails.primaryContactName", "Primary Contact Name"),
        MandatoryFieldRule("bankingDetails.accountNumber", "Account Number"),
        MandatoryFieldRule("complianceDetails.taxIdentificationNumber", "Tax Identification Number"),
        EmailFormatRule(),
        PhoneFormatRule(),
    ]
