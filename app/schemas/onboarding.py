"""Onboarding submission schemas: the four detail aggregates in and out."""

from __future__ import annotations

from datetime import date, datetime

from app.schemas.common import CamelModel
from app.schemas.follow_up import FollowUpOut, ValidationIssueOut


class BusinessDetailsIn(CamelModel):
    legal_business_name: str | None = None
    business_registration_number: str | None = None
    business_type: str | None = None
    year_established: int | None = None
    business_address: str | None = None
    number_of_employees: str | None = None
    industry_sector: str | None = None


class ContactDetailsIn(CamelModel):
    primary_contact_name: str | None = None
    job_title: str | None = None
    email_address: str | None = None
    phone_number: str | None = None
    secondary_contact_name: str | None = None
    secondary_contact_email: str | None = None
    website: str | None = None


class BankingDetailsIn(CamelModel):
    bank_name: str | None = None
    account_holder_name: str | None = None
    account_number: str | None = None
    account_type: str | None = None
    routing_swift_code: str | None = None
    iban: str | None = None
    payment_terms: str | None = None
    currency: str | None = None


class ComplianceDetailsIn(CamelModel):
    tax_identification_number: str | None = None
    business_license_number: str | None = None
    license_expiry_date: date | None = None
    insurance_provider: str | None = None
    insurance_policy_number: str | None = None
    insurance_expiry_date: date | None = None
    industry_certifications: str | None = None


class OnboardingSubmit(CamelModel):
    """Aggregates left out keep whatever an earlier submission stored."""

    business_details: BusinessDetailsIn | None = None
    contact_details: ContactDetailsIn | None = None
    banking_details: BankingDetailsIn | None = None
    compliance_details: ComplianceDetailsIn | None = None


class BusinessDetailsOut(BusinessDetailsIn):
    id: str


class ContactDetailsOut(ContactDetailsIn):
    id: str


class BankingDetailsOut(BankingDetailsIn):
    id: str


class ComplianceDetailsOut(ComplianceDetailsIn):
    id: str


class OnboardingOut(CamelModel):
    id: str
    vendor_request_id: str
    status: str
    is_complete: bool
    submitted_at: datetime | None = None
    last_submitted_at: datetime | None = None
    business_details: BusinessDetailsOut | None = None
    contact_details: ContactDetailsOut | None = None
    banking_details: BankingDetailsOut | None = None
    compliance_details: ComplianceDetailsOut | None = None
    created_at: datetime
    updated_at: datetime


class SubmissionOut(CamelModel):
    onboarding: OnboardingOut
    status: str
    issues: list[ValidationIssueOut]
    follow_ups: list[FollowUpOut]
