"""Shared fixtures: in-memory database, fake collaborators, pinned clock."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.domain  # noqa: F401  (register every model on Base.metadata)
from app.core.clock import FixedClock
from app.core.exceptions import MessageGenerationError
from app.db.base import Base, enable_sqlite_savepoints
from app.schemas.onboarding import (
    BankingDetailsIn,
    BusinessDetailsIn,
    ComplianceDetailsIn,
    ContactDetailsIn,
    OnboardingSubmit,
)
from app.schemas.vendor import VendorRequestCreate
from app.services.factory import build_services
from app.services.message_generator import GeneratedMessage

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class FakeEmail:
    """Records what would have been sent."""

    enabled = True

    def __init__(self):
        self.invitations: list[tuple[str, str, str]] = []
        self.follow_ups: list[dict] = []

    async def send_invitation(self, to_email, vendor_name, token):
        self.invitations.append((to_email, vendor_name, token))
        return True

    async def send_follow_up(self, to_email, vendor_name, body, follow_up_type, token=None):
        self.follow_ups.append(
            {"to": to_email, "vendor": vendor_name, "body": body, "type": follow_up_type, "token": token}
        )
        return True


class FakeGenerator:
    def __init__(self, text: str = "Generated follow-up body", fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt: str, context: str) -> GeneratedMessage:
        self.calls.append((prompt, context))
        if self.fail:
            raise MessageGenerationError("upstream unavailable")
        return GeneratedMessage(text=self.text, model="fake-model", tokens_used=42)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def email():
    return FakeEmail()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def services(session, email, generator, clock):
    return build_services(session, email=email, generator=generator, clock=clock)


@pytest.fixture
def request_data():
    def _make(email: str = "sales@acme.example.com", name: str = "Acme Ltd") -> VendorRequestCreate:
        return VendorRequestCreate(
            vendor_name=name,
            vendor_email=email,
            contact_person="Jane Doe",
            contact_number="2345678900",
            vendor_category="Hardware",
        )

    return _make


@pytest.fixture
def clean_submission():
    """A submission that passes every field rule and every business rule."""

    def _make(**overrides) -> OnboardingSubmit:
        data = {
            "business_details": BusinessDetailsIn(
                legal_business_name="Acme Ltd",
                business_address="1 Main Street, Springfield",
                year_established=2001,
                number_of_employees="50-100",
                industry_sector="Manufacturing",
            ),
            "contact_details": ContactDetailsIn(
                primary_contact_name="Jane Doe",
                job_title="CFO",
                email_address="jane@acme.example.com",
                phone_number="+1-234-5678900",
                website="https://acme.example.com",
            ),
            "banking_details": BankingDetailsIn(
                bank_name="First Bank",
                account_number="12345678",
                routing_swift_code="ABCDUS33",
                payment_terms="Net 30",
                currency="USD",
            ),
            "compliance_details": ComplianceDetailsIn(
                tax_identification_number="12-3456789",
                license_expiry_date=date(2027, 1, 1),
                insurance_expiry_date=date(2027, 6, 30),
            ),
        }
        data.update(overrides)
        return OnboardingSubmit(**data)

    return _make


@pytest.fixture
def create_request(services, request_data):
    async def _create(email: str = "sales@acme.example.com", actor: str = "buyer1"):
        return await services.requests.create_vendor_request(request_data(email), actor)

    return _create


@pytest.fixture
def submitted_onboarding(services, create_request, clean_submission):
    """Invite a vendor and store a clean submission; returns the onboarding."""

    async def _submit(email: str = "sales@acme.example.com", **overrides):
        request = await create_request(email)
        result = await services.onboarding.submit(request.invitation_token, clean_submission(**overrides))
        return result.onboarding

    return _submit
