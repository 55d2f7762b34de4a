"""SQLAlchemy ORM models for the submitted onboarding record and its four detail aggregates."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import SoftDeleteMixin, TimestampMixin


def _uuid() -> str:
    return str(uuid.uuid4())


class VendorOnboarding(Base, TimestampMixin, SoftDeleteMixin):
    """Submitted data container, one-to-one with a VendorRequest."""

    __tablename__ = "vendor_onboardings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    vendor_request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # First successful submission; resubmissions update the record in place
    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    vendor_request: Mapped["VendorRequest"] = relationship(lazy="selectin")
    business_details: Mapped[Optional["VendorBusinessDetails"]] = relationship(
        lazy="selectin", uselist=False, cascade="all, delete-orphan"
    )
    contact_details: Mapped[Optional["VendorContactDetails"]] = relationship(
        lazy="selectin", uselist=False, cascade="all, delete-orphan"
    )
    banking_details: Mapped[Optional["VendorBankingDetails"]] = relationship(
        lazy="selectin", uselist=False, cascade="all, delete-orphan"
    )
    compliance_details: Mapped[Optional["VendorComplianceDetails"]] = relationship(
        lazy="selectin", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def status(self) -> str:
        return self.vendor_request.status

    @property
    def vendor_contact_email(self) -> str:
        """Where follow-ups go: the submitted contact email, else the invited address."""
        if self.contact_details is not None and self.contact_details.email_address:
            return self.contact_details.email_address
        return self.vendor_request.vendor_email


class VendorBusinessDetails(Base, TimestampMixin):
    __tablename__ = "vendor_business_details"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    legal_business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    business_registration_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    business_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    year_established: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    business_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    number_of_employees: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    industry_sector: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class VendorContactDetails(Base, TimestampMixin):
    __tablename__ = "vendor_contact_details"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    primary_contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    job_title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    secondary_contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    secondary_contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class VendorBankingDetails(Base, TimestampMixin):
    __tablename__ = "vendor_banking_details"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    account_holder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    account_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    routing_swift_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    iban: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_terms: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)


class VendorComplianceDetails(Base, TimestampMixin):
    __tablename__ = "vendor_compliance_details"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    onboarding_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_onboardings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    tax_identification_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    business_license_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    license_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    insurance_provider: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    insurance_policy_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    insurance_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    industry_certifications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
