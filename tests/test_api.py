"""HTTP surface: envelopes, status codes, actor header, vendor portal flow."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.db.base import get_db, session_scope
from app.main import create_app
from app.routers.deps import get_clock, get_email_service, get_generator, get_monitor
from app.services.dispatch import wait_for_dispatch
from app.services.monitor import UnresponsiveVendorMonitor
from app.services.templates import TemplateService

BUYER = {"X-Actor": "buyer1"}

SUBMISSION = {
    "businessDetails": {
        "legalBusinessName": "Acme Ltd",
        "businessAddress": "1 Main Street",
        "yearEstablished": 2001,
        "numberOfEmployees": "50-100",
        "industrySector": "Manufacturing",
    },
    "contactDetails": {
        "primaryContactName": "Jane Doe",
        "jobTitle": "CFO",
        "emailAddress": "jane@acme.example.com",
        "phoneNumber": "12",
        "website": "https://acme.example.com",
    },
    "bankingDetails": {
        "bankName": "First Bank",
        "accountNumber": "12345678",
        "routingSwiftCode": "ABCDUS33",
        "paymentTerms": "Net 30",
        "currency": "USD",
    },
    "complianceDetails": {
        "taxIdentificationNumber": "12-3456789",
        "licenseExpiryDate": "2027-01-01",
        "insuranceExpiryDate": "2027-06-30",
    },
}


@pytest.fixture
async def client(session_factory, email, generator, clock):
    async with session_scope(session_factory) as session:
        await TemplateService(session, clock).seed_defaults()

    async def _get_db():
        async with session_scope(session_factory) as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_email_service] = lambda: email
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_monitor] = lambda: UnresponsiveVendorMonitor(
        session_factory, clock=clock, email=email, threshold_days=3, min_follow_ups=2, auto_escalate=False
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await wait_for_dispatch(timeout=5)


async def _invite(client, email_service, address="sales@acme.example.com"):
    resp = await client.post(
        "/api/v1/procurement/vendors",
        json={"vendorName": "Acme Ltd", "vendorEmail": address, "contactPerson": "Jane Doe"},
        headers=BUYER,
    )
    assert resp.status_code == 201, resp.text
    await wait_for_dispatch(timeout=5)
    token = next(t for to, _, t in email_service.invitations if to == address)
    return resp.json()["data"], token


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["version"] == "1.0.0"
    assert body["schedulerRunning"] is False


class TestVendorRequests:
    async def test_create_uses_actor_and_camel_case(self, client, email):
        data, token = await _invite(client, email)
        assert data["status"] == "REQUESTED"
        assert data["createdBy"] == "buyer1"
        assert data["vendorEmail"] == "sales@acme.example.com"
        assert "invitationToken" not in data
        assert token

    async def test_default_actor(self, client):
        resp = await client.post(
            "/api/v1/procurement/vendors",
            json={"vendorName": "Beta", "vendorEmail": "beta@vendor.example.com"},
        )
        assert resp.json()["data"]["createdBy"] == "procurement"

    async def test_duplicate_email_conflicts(self, client, email):
        await _invite(client, email)
        resp = await client.post(
            "/api/v1/procurement/vendors",
            json={"vendorName": "Acme again", "vendorEmail": "sales@acme.example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    async def test_invalid_email_rejected(self, client):
        resp = await client.post(
            "/api/v1/procurement/vendors", json={"vendorName": "X", "vendorEmail": "nope"}
        )
        assert resp.status_code == 422

    async def test_list_is_paginated(self, client, email):
        await _invite(client, email, "a@vendor.example.com")
        await _invite(client, email, "b@vendor.example.com")

        resp = await client.get("/api/v1/procurement/vendors", params={"limit": 1})

        body = resp.json()
        assert len(body["data"]) == 1
        assert body["meta"] == {"total": 2, "page": 1, "limit": 1, "pages": 2}

    async def test_unknown_sort_field_rejected(self, client):
        resp = await client.get("/api/v1/procurement/vendors", params={"sort": "deleted_at"})
        assert resp.status_code == 422

    async def test_status_update_and_unknown_status(self, client, email):
        data, _ = await _invite(client, email)
        url = f"/api/v1/procurement/vendors/{data['id']}/status"

        ok = await client.patch(url, json={"status": "VALIDATED"}, headers=BUYER)
        assert ok.json()["data"]["status"] == "VALIDATED"

        bad = await client.patch(url, json={"status": "ARCHIVED"})
        assert bad.status_code == 422
        assert bad.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_delete_and_restore(self, client, email):
        data, _ = await _invite(client, email)
        vendor_url = f"/api/v1/procurement/vendors/{data['id']}"

        deleted = await client.delete(vendor_url)
        assert deleted.json()["data"]["status"] == "DELETED"
        listed = await client.get("/api/v1/procurement/vendors/deleted")
        assert [v["id"] for v in listed.json()["data"]] == [data["id"]]

        restored = await client.post(f"{vendor_url}/restore")
        assert restored.json()["data"]["status"] == "REQUESTED"
        again = await client.post(f"{vendor_url}/restore")
        assert again.status_code == 409

    async def test_unknown_vendor(self, client):
        resp = await client.get("/api/v1/procurement/vendors/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


class TestVendorPortal:
    async def test_full_flow(self, client, email):
        data, token = await _invite(client, email)

        invitation = await client.get(f"/api/v1/vendor/invitations/{token}")
        assert invitation.json()["data"]["vendorName"] == "Acme Ltd"

        opened = await client.post(f"/api/v1/vendor/invitations/{token}/open")
        assert opened.json()["data"]["status"] == "AWAITING_RESPONSE"

        submitted = await client.post(f"/api/v1/vendor/onboarding/{token}", json=SUBMISSION)
        assert submitted.status_code == 200, submitted.text
        result = submitted.json()["data"]
        assert result["status"] == "MISSING_DATA"
        assert [i["fieldName"] for i in result["issues"]] == ["phoneNumber"]
        assert result["followUps"][0]["followUpType"] == "INCORRECT_DATA"

        # the follow-up email goes to the submitted contact address
        await wait_for_dispatch(timeout=5)
        assert email.follow_ups[0]["to"] == "jane@acme.example.com"

        activity = await client.get(f"/api/v1/procurement/vendors/{data['id']}/activity")
        types = {a["activityType"] for a in activity.json()["data"]}
        assert {"LINK_OPENED", "FORM_SUBMITTED", "STATUS_UPDATED"} <= types

        onboarding = await client.get(f"/api/v1/procurement/vendors/{data['id']}/onboarding")
        assert onboarding.json()["data"]["contactDetails"]["phoneNumber"] == "12"

    async def test_unknown_token(self, client):
        resp = await client.get("/api/v1/vendor/invitations/bogus")
        assert resp.status_code == 404

    async def test_expired_token(self, client, email, clock):
        _, token = await _invite(client, email)
        clock.advance(days=10)
        resp = await client.post(f"/api/v1/vendor/onboarding/{token}", json=SUBMISSION)
        assert resp.status_code == 410
        assert resp.json()["error"]["code"] == "INVITATION_EXPIRED"


class TestProcurementWorkflow:
    async def _submitted(self, client, email):
        data, token = await _invite(client, email)
        result = (await client.post(f"/api/v1/vendor/onboarding/{token}", json=SUBMISSION)).json()["data"]
        return data, result["onboarding"]["id"]

    async def test_issues_and_resolution(self, client, email):
        _, onboarding_id = await self._submitted(client, email)

        issues = (await client.get(f"/api/v1/procurement/onboardings/{onboarding_id}/issues")).json()["data"]
        assert len(issues) == 1
        counts = (await client.get(f"/api/v1/procurement/onboardings/{onboarding_id}/issues/count")).json()
        assert counts["data"] == {"open": 1, "critical": 0}

        resolved = await client.post(
            f"/api/v1/procurement/issues/{issues[0]['id']}/resolve", json={"notes": "called vendor"}, headers=BUYER
        )
        assert resolved.json()["data"]["resolvedBy"] == "buyer1"
        twice = await client.post(f"/api/v1/procurement/issues/{issues[0]['id']}/resolve")
        assert twice.status_code == 409

    async def test_ai_follow_up_send_and_escalate(self, client, email, generator):
        _, onboarding_id = await self._submitted(client, email)

        created = await client.post(
            "/api/v1/procurement/ai/follow-ups",
            json={"onboardingId": onboarding_id, "followUpType": "MISSING_DATA"},
            headers=BUYER,
        )
        assert created.status_code == 201, created.text
        follow_up = created.json()["data"]
        assert follow_up["status"] == "PENDING"
        assert follow_up["message"] == generator.text

        sent = await client.post(f"/api/v1/procurement/follow-ups/{follow_up['id']}/send")
        assert sent.json()["data"]["status"] == "SENT"

        escalated = await client.post(f"/api/v1/procurement/follow-ups/{follow_up['id']}/escalate")
        assert escalated.status_code == 201
        assert escalated.json()["data"]["escalationLevel"] == 1

        below = await client.post(
            "/api/v1/procurement/ai/follow-ups",
            json={"onboardingId": onboarding_id, "followUpType": "MISSING_DATA", "escalationLevel": 0},
        )
        assert below.status_code == 422

        previous = (await client.get(f"/api/v1/procurement/follow-ups/{follow_up['id']}")).json()["data"]
        assert previous["escalatedTo"] == escalated.json()["data"]["id"]

    async def test_follow_up_filters(self, client, email):
        await self._submitted(client, email)
        resp = await client.get("/api/v1/procurement/follow-ups", params={"status": "ALL", "type": "INCORRECT_DATA"})
        assert len(resp.json()["data"]) == 1
        bad = await client.get("/api/v1/procurement/follow-ups", params={"type": "NOPE"})
        assert bad.status_code == 422

    async def test_template_crud_and_preview(self, client, email):
        _, onboarding_id = await self._submitted(client, email)

        created = await client.post(
            "/api/v1/procurement/templates",
            json={
                "templateName": "Clarify",
                "followUpType": "CLARIFICATION_NEEDED",
                "subjectTemplate": "Question for {{vendorName}}",
                "bodyTemplate": "Open items: {{issueCount}}",
            },
        )
        assert created.status_code == 201, created.text
        template_id = created.json()["data"]["id"]

        preview = await client.post(
            f"/api/v1/procurement/templates/{template_id}/preview", json={"onboardingId": onboarding_id}
        )
        assert preview.json()["data"] == {"subject": "Question for Acme Ltd", "body": "Open items: 1"}

        await client.delete(f"/api/v1/procurement/templates/{template_id}")
        listed = await client.get("/api/v1/procurement/templates", params={"type": "CLARIFICATION_NEEDED"})
        assert listed.json()["data"] == []


class TestNotificationsAndMonitor:
    async def test_notifications_for_actor(self, client, email):
        await _invite(client, email)

        listed = await client.get("/api/v1/notifications", headers=BUYER)
        [notification] = listed.json()["data"]
        assert notification["type"] == "VENDOR_REQUEST_CREATED"
        assert notification["severity"] == "info"

        other = await client.get("/api/v1/notifications", headers={"X-Actor": "someone-else"})
        assert other.json()["data"] == []

        marked = await client.post("/api/v1/notifications/read-all", headers=BUYER)
        assert marked.json()["data"] == {"updated": 1}
        count = await client.get("/api/v1/notifications/unread-count", headers=BUYER)
        assert count.json()["data"] == {"count": 0}

    async def test_on_demand_scan(self, client, email, clock):
        data, token = await _invite(client, email)
        onboarding_id = (
            await client.post(f"/api/v1/vendor/onboarding/{token}", json=SUBMISSION)
        ).json()["data"]["onboarding"]["id"]
        await client.post(
            f"/api/v1/procurement/onboardings/{onboarding_id}/follow-ups",
            json={"followUpType": "MANUAL", "message": "Any news?"},
        )
        clock.advance(days=4)

        resp = await client.post("/api/v1/procurement/check-unresponsive-vendors")

        summary = resp.json()["data"]
        assert summary["candidates"] == 1
        assert summary["notified"] == 1
        assert summary["notifiedOnboardingIds"] == [onboarding_id]

    async def test_analytics_dashboard(self, client, email):
        await _invite(client, email)

        resp = await client.get("/api/v1/procurement/analytics")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["statusBreakdown"] == {"REQUESTED": 1}
        assert data["overallStats"]["totalVendors"] == 1
        assert data["overallStats"]["requestedVendors"] == 1
        assert data["overallStats"]["totalInteractionsLast7Days"] >= 1
        assert len(data["dailyMetrics"]) == 7
        assert data["dailyMetrics"][-1]["date"] == "Mar 2"
        assert data["dailyMetrics"][-1]["newVendors"] == 1
