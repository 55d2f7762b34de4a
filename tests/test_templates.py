"""Placeholder rendering, variable map and template lookup."""

from types import SimpleNamespace

import pytest

from app.core.exceptions import TemplateNotFoundError
from app.domain.enums import FollowUpType
from app.services.templates import DEFAULT_TEMPLATES, build_variable_map, render


class TestRender:
    def test_substitutes_known_names(self):
        assert render("Hello {{vendorName}}!", {"vendorName": "Acme"}) == "Hello Acme!"

    def test_unknown_names_render_empty(self):
        assert render("[{{nope}}]", {}) == "[]"

    def test_tolerates_whitespace_inside_braces(self):
        assert render("{{ vendorName }}", {"vendorName": "Acme"}) == "Acme"

    def test_single_pass_does_not_expand_values(self):
        # A value that itself looks like a placeholder is emitted literally
        assert render("{{a}}", {"a": "{{b}}", "b": "x"}) == "{{b}}"

    def test_no_template_placeholder_survives(self):
        text = "Dear {{vendorName}}, {{ issueCount }} issue(s){{unknown}} by {{currentDate}}."
        out = render(text, {"vendorName": "Acme", "issueCount": 2})
        assert out == "Dear Acme, 2 issue(s) by ."
        assert "{{" not in out and "}}" not in out

    def test_text_without_placeholders_is_unchanged(self):
        text = "Please resubmit { your } banking details."
        assert render(text, {"vendorName": "Acme"}) == text


def _issue(field, issue_type, message, severity="HIGH"):
    return SimpleNamespace(
        field_name=field, issue_type=issue_type, error_message=message, severity=severity
    )


def test_variable_map(clock):
    onboarding = SimpleNamespace(
        id="ob-1",
        vendor_request=SimpleNamespace(
            vendor_name="Acme Ltd",
            vendor_email="sales@acme.example.com",
            contact_person="Jane Doe",
            contact_number=None,
        ),
    )
    issues = [
        _issue("legalBusinessName", "MISSING_DATA", "Legal Business Name is required"),
        _issue("emailAddress", "INCORRECT_DATA", "Invalid email format", "CRITICAL"),
        _issue("phoneNumber", "MISSING_DATA", "Phone number is required"),
    ]

    variables = build_variable_map(onboarding, issues, clock=clock)

    assert variables["vendorName"] == "Acme Ltd"
    assert variables["contactNumber"] == ""
    assert variables["missingFields"] == "legalBusinessName\nphoneNumber"
    assert variables["incorrectFields"] == "emailAddress"
    assert variables["issueCount"] == "3"
    assert variables["criticalIssueCount"] == "1"
    assert variables["issueList"].splitlines()[1] == "2. emailAddress: Invalid email format"
    assert variables["currentDate"] == "2026-03-02"


def test_default_templates_have_a_base_level_per_type():
    base_types = {t["follow_up_type"] for t in DEFAULT_TEMPLATES if t["escalation_level"] == 0}
    assert {
        FollowUpType.MISSING_DATA.value,
        FollowUpType.INCORRECT_DATA.value,
        FollowUpType.EXPIRED_DOCUMENT.value,
        FollowUpType.DELAYED_RESPONSE.value,
        FollowUpType.UNRESPONSIVE.value,
    } <= base_types


class TestTemplateService:
    async def test_seed_only_when_empty(self, services):
        assert await services.templates.seed_defaults() == len(DEFAULT_TEMPLATES)
        assert await services.templates.seed_defaults() == 0

    async def test_exact_level_is_preferred(self, services):
        await services.templates.seed_defaults()
        template = await services.templates.get_template(FollowUpType.MISSING_DATA, 1)
        assert template.escalation_level == 1

    async def test_missing_level_falls_back_to_base(self, services):
        await services.templates.seed_defaults()
        template = await services.templates.get_template(FollowUpType.MISSING_DATA, 9)
        assert template.escalation_level == 0

    async def test_unknown_type_raises(self, services):
        with pytest.raises(TemplateNotFoundError):
            await services.templates.get_template(FollowUpType.COMPLIANCE_ISSUE, 0)

    async def test_deactivated_template_is_not_found(self, services):
        created = await services.templates.create(
            {
                "template_name": "Compliance",
                "follow_up_type": FollowUpType.COMPLIANCE_ISSUE,
                "subject_template": "Compliance for {{vendorName}}",
                "body_template": "Please fix {{issueList}}",
            },
            actor="buyer1",
        )
        assert (await services.templates.get_template(FollowUpType.COMPLIANCE_ISSUE)).id == created.id

        await services.templates.deactivate(created.id)
        with pytest.raises(TemplateNotFoundError):
            await services.templates.get_template(FollowUpType.COMPLIANCE_ISSUE)
