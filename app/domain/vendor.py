"""SQLAlchemy ORM model for vendor requests (the invitation side of onboarding).

Pattern shared by all domain models:
  - Inherit Base plus the column mixins they need
  - UUID primary key stored as String(36)
  - created_at / updated_at from TimestampMixin, deleted_at from SoftDeleteMixin
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.enums import VendorStatus
from app.domain.mixins import SoftDeleteMixin, TimestampMixin


class VendorRequest(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "vendor_requests"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    vendor_email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    contact_person: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    vendor_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # One of VendorStatus; authoritative status for the request/onboarding pair
    status: Mapped[str] = mapped_column(
        String(50), default=VendorStatus.REQUESTED.value, nullable=False, index=True
    )

    invitation_token: Mapped[Optional[str]] = mapped_column(
        String(64), unique=True, index=True, nullable=True
    )
    invitation_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    invitation_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Procurement user who invited the vendor; receives workflow notifications
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)

    @property
    def status_enum(self) -> VendorStatus:
        return VendorStatus(self.status)
