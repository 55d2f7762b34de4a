"""Explicit accessor table from dotted field names to onboarding getters.

Rules name the field they check (``"contactDetails.emailAddress"``); the
evaluator resolves that name here. Unknown names raise ``KeyError`` so a
misconfigured rule is isolated by the evaluator instead of silently passing.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from app.domain.onboarding import VendorOnboarding

FieldGetter = Callable[[VendorOnboarding], Any]


def _detail(aggregate: str, attribute: str) -> FieldGetter:
    def getter(onboarding: VendorOnboarding) -> Any:
        details = getattr(onboarding, aggregate)
        if details is None:
            return None
        return getattr(details, attribute)

    return getter


_AGGREGATES: dict[str, tuple[str, dict[str, str]]] = {
    "businessDetails": ("business_details", {
        "legalBusinessName": "legal_business_name",
        "businessRegistrationNumber": "business_registration_number",
        "businessType": "business_type",
        "yearEstablished": "year_established",
        "businessAddress": "business_address",
        "numberOfEmployees": "number_of_employees",
        "industrySector": "industry_sector",
    }),
    "contactDetails": ("contact_details", {
        "primaryContactName": "primary_contact_name",
        "jobTitle": "job_title",
        "emailAddress": "email_address",
        "phoneNumber": "phone_number",
        "secondaryContactName": "secondary_contact_name",
        "secondaryContactEmail": "secondary_contact_email",
        "website": "website",
    }),
    "bankingDetails": ("banking_details", {
        "bankName": "bank_name",
        "accountHolderName": "account_holder_name",
        "accountNumber": "account_number",
        "accountType": "account_type",
        "routingSwiftCode": "routing_swift_code",
        "iban": "iban",
        "paymentTerms": "payment_terms",
        "currency": "currency",
    }),
    "complianceDetails": ("compliance_details", {
        "taxIdentificationNumber": "tax_identification_number",
        "businessLicenseNumber": "business_license_number",
        "licenseExpiryDate": "license_expiry_date",
        "insuranceProvider": "insurance_provider",
        "insurancePolicyNumber": "insurance_policy_number",
        "insuranceExpiryDate": "insurance_expiry_date",
        "industryCertifications": "industry_certifications",
    }),
}

FIELD_ACCESSORS: dict[str, FieldGetter] = {
    f"{prefix}.{name}": _detail(aggregate, attribute)
    for prefix, (aggregate, fields) in _AGGREGATES.items()
    for name, attribute in fields.items()
}
FIELD_ACCESSORS["vendorEmail"] = lambda onboarding: onboarding.vendor_request.vendor_email
FIELD_ACCESSORS["vendorName"] = lambda onboarding: onboarding.vendor_request.vendor_name


def register_field(name: str, getter: FieldGetter) -> None:
    """Expose an extra field to rules (plugins, tests)."""
    FIELD_ACCESSORS[name] = getter


def extract_field(onboarding: VendorOnboarding, name: str) -> Any:
    try:
        getter = FIELD_ACCESSORS[name]
    except KeyError:
        raise KeyError(f"Unknown onboarding field: {name}") from None
    return getter(onboarding)


def short_name(name: str) -> str:
    """Last segment of a dotted field name: ``contactDetails.emailAddress`` -> ``emailAddress``."""
    return name.rsplit(".", 1)[-1]
