"""Notification and monitor response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import computed_field

from app.domain.enums import NotificationType
from app.schemas.common import CamelModel


class NotificationOut(CamelModel):
    id: str
    recipient_username: str
    type: str
    title: str
    message: str
    vendor_request_id: str | None = None
    action_url: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime

    @computed_field
    @property
    def severity(self) -> str:
        try:
            return NotificationType(self.type).severity
        except ValueError:
            return "info"


class UnreadCount(CamelModel):
    count: int


class MarkedRead(CamelModel):
    updated: int


class ScanSummaryOut(CamelModel):
    scanned_at: datetime
    threshold: datetime
    candidates: int
    notified: int
    escalated: int
    failed: int
    notified_onboarding_ids: list[str]
