"""Per-field validation rules and the field accessor table they read from."""

from app.validation.fields import FIELD_ACCESSORS, extract_field, register_field
from app.validation.rules import (
    EmailFormatRule,
    MandatoryFieldRule,
    PhoneFormatRule,
    ValidationResult,
    ValidationRule,
    default_rules,
)

__all__ = [
    "EmailFormatRule",
    "FIELD_ACCESSORS",
    "MandatoryFieldRule",
    "PhoneFormatRule",
    "ValidationResult",
    "ValidationRule",
    "default_rules",
    "extract_field",
    "register_field",
]
