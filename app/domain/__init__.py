"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  vendor.py        VendorRequest, the invitation and authoritative status
  onboarding.py    VendorOnboarding plus business/contact/banking/compliance details
  validation.py    ValidationIssue rows produced by the rule evaluator
  follow_up.py     FollowUp, FollowUpTemplate, AIMessageHistory
  notification.py  In-app notifications for procurement users
  activity_log.py  Append-only vendor activity log
  enums.py         Status and type value sets
  mixins.py        Shared CreatedAtMixin, TimestampMixin, SoftDeleteMixin
"""

from app.domain.activity_log import VendorActivityLog
from app.domain.follow_up import AIMessageHistory, FollowUp, FollowUpTemplate
from app.domain.notification import Notification
from app.domain.onboarding import (
    VendorBankingDetails,
    VendorBusinessDetails,
    VendorComplianceDetails,
    VendorContactDetails,
    VendorOnboarding,
)
from app.domain.validation import ValidationIssue
from app.domain.vendor import VendorRequest

__all__ = [
    "AIMessageHistory",
    "FollowUp",
    "FollowUpTemplate",
    "Notification",
    "ValidationIssue",
    "VendorActivityLog",
    "VendorBankingDetails",
    "VendorBusinessDetails",
    "VendorComplianceDetails",
    "VendorContactDetails",
    "VendorOnboarding",
    "VendorRequest",
]
