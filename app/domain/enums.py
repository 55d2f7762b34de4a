"""Closed value sets shared by the ORM models, services and schemas.

Values are stored as plain strings in the database (see the model columns),
so renaming a member is a data migration.
"""

from __future__ import annotations

from enum import Enum


class VendorStatus(str, Enum):
    REQUESTED = "REQUESTED"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"
    MISSING_DATA = "MISSING_DATA"
    AWAITING_VALIDATION = "AWAITING_VALIDATION"
    VALIDATED = "VALIDATED"
    DENIED = "DENIED"
    DELETED = "DELETED"

    @property
    def display_name(self) -> str:
        return _STATUS_DISPLAY[self]


_STATUS_DISPLAY = {
    VendorStatus.REQUESTED: "Requested",
    VendorStatus.AWAITING_RESPONSE: "Waiting for vendor response",
    VendorStatus.MISSING_DATA: "Waiting for missing data",
    VendorStatus.AWAITING_VALIDATION: "Waiting for validation",
    VendorStatus.VALIDATED: "Validated",
    VendorStatus.DENIED: "Denied",
    VendorStatus.DELETED: "Deleted",
}


class IssueType(str, Enum):
    MISSING_DATA = "MISSING_DATA"
    INCORRECT_DATA = "INCORRECT_DATA"
    INCORRECT_FILE = "INCORRECT_FILE"
    EXPIRED_DOCUMENT = "EXPIRED_DOCUMENT"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IssueStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class FollowUpStatus(str, Enum):
    SENT = "SENT"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


UNRESOLVED_FOLLOW_UP_STATUSES = (FollowUpStatus.SENT.value, FollowUpStatus.PENDING.value)


class FollowUpType(str, Enum):
    MISSING_DATA = "MISSING_DATA"
    INCOMPLETE_DATA = "INCOMPLETE_DATA"
    INCORRECT_DATA = "INCORRECT_DATA"
    INCORRECT_FILE = "INCORRECT_FILE"
    EXPIRED_DOCUMENT = "EXPIRED_DOCUMENT"
    DELAYED_RESPONSE = "DELAYED_RESPONSE"
    UNRESPONSIVE = "UNRESPONSIVE"
    CLARIFICATION_NEEDED = "CLARIFICATION_NEEDED"
    COMPLIANCE_ISSUE = "COMPLIANCE_ISSUE"
    MANUAL = "MANUAL"


class NotificationType(str, Enum):
    VENDOR_REQUEST_CREATED = "VENDOR_REQUEST_CREATED"
    VENDOR_RESPONSE_RECEIVED = "VENDOR_RESPONSE_RECEIVED"
    FORM_SUBMITTED = "FORM_SUBMITTED"
    STATUS_CHANGED = "STATUS_CHANGED"
    FOLLOW_UP_REQUIRED = "FOLLOW_UP_REQUIRED"
    MISSING_DATA = "MISSING_DATA"
    VALIDATION_PENDING = "VALIDATION_PENDING"
    VENDOR_APPROVED = "VENDOR_APPROVED"
    VENDOR_DENIED = "VENDOR_DENIED"
    VENDOR_UNRESPONSIVE = "VENDOR_UNRESPONSIVE"

    @property
    def severity(self) -> str:
        """UI severity: info | success | warning | error."""
        return _NOTIFICATION_SEVERITY.get(self, "info")


_NOTIFICATION_SEVERITY = {
    NotificationType.VENDOR_RESPONSE_RECEIVED: "success",
    NotificationType.FORM_SUBMITTED: "success",
    NotificationType.VENDOR_APPROVED: "success",
    NotificationType.FOLLOW_UP_REQUIRED: "warning",
    NotificationType.MISSING_DATA: "warning",
    NotificationType.VALIDATION_PENDING: "warning",
    NotificationType.VENDOR_DENIED: "error",
    NotificationType.VENDOR_UNRESPONSIVE: "error",
}


class ActivityType(str, Enum):
    VENDOR_REQUEST_CREATED = "VENDOR_REQUEST_CREATED"
    INVITATION_SENT = "INVITATION_SENT"
    INVITATION_RESENT = "INVITATION_RESENT"
    LINK_OPENED = "LINK_OPENED"
    FORM_SUBMITTED = "FORM_SUBMITTED"
    STATUS_UPDATED = "STATUS_UPDATED"
    FOLLOW_UP_CREATED = "FOLLOW_UP_CREATED"
    FOLLOW_UP_RESOLVED = "FOLLOW_UP_RESOLVED"
    VENDOR_APPROVED = "VENDOR_APPROVED"
    VENDOR_DENIED = "VENDOR_DENIED"
    VENDOR_DELETED = "VENDOR_DELETED"
    VENDOR_RESTORED = "VENDOR_RESTORED"
