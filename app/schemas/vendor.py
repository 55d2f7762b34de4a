"""Vendor request Pydantic schemas (request DTOs and response models)."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from app.schemas.common import CamelModel


class VendorRequestCreate(CamelModel):
    vendor_name: str = Field(min_length=1, max_length=255)
    vendor_email: EmailStr
    contact_person: str | None = None
    contact_number: str | None = None
    vendor_category: str | None = None
    remarks: str | None = None


class StatusUpdate(CamelModel):
    status: str


class VendorRequestOut(CamelModel):
    id: str
    vendor_name: str
    vendor_email: str
    contact_person: str | None = None
    contact_number: str | None = None
    vendor_category: str | None = None
    remarks: str | None = None
    status: str
    invitation_sent_at: datetime | None = None
    invitation_expires_at: datetime | None = None
    created_by: str
    deleted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class InvitationOut(CamelModel):
    """What the vendor portal sees after opening an invitation link."""

    id: str
    vendor_name: str
    vendor_email: str
    contact_person: str | None = None
    status: str
    invitation_expires_at: datetime | None = None


class ActivityLogOut(CamelModel):
    id: str
    vendor_request_id: str
    activity_type: str
    description: str | None = None
    old_status: str | None = None
    new_status: str | None = None
    details: dict | None = None
    performed_by: str
    created_at: datetime


class DailyMetricOut(CamelModel):
    date: str
    interactions: int
    new_vendors: int
    form_submissions: int


class OverallStatsOut(CamelModel):
    total_vendors: int
    requested_vendors: int
    validated_vendors: int
    pending_vendors: int
    denied_vendors: int
    total_interactions_last_7_days: int
    avg_daily_interactions: float
    active_rate: int
    total_follow_ups: int
    unresolved_follow_ups: int


class VendorAnalyticsOut(CamelModel):
    """Dashboard payload; ``statusBreakdown`` keys are raw status values."""

    daily_metrics: list[DailyMetricOut]
    overall_stats: OverallStatsOut
    status_breakdown: dict[str, int]
