"""Vendor-facing router: everything here is addressed by invitation token."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.response import DataResponse
from app.routers.deps import get_services
from app.schemas.follow_up import FollowUpOut, ValidationIssueOut
from app.schemas.onboarding import OnboardingOut, OnboardingSubmit, SubmissionOut
from app.schemas.vendor import InvitationOut
from app.services.factory import Services

router = APIRouter(prefix="/vendor", tags=["Vendor Portal"])

VENDOR_ACTOR = "vendor"


@router.get("/invitations/{token}", response_model=DataResponse[InvitationOut])
async def validate_invitation(token: str, services: Services = Depends(get_services)):
    """Check a token without side effects (404 unknown, 410 expired)."""
    request = await services.requests.get_by_token(token)
    return {"data": InvitationOut.model_validate(request)}


@router.post("/invitations/{token}/open", response_model=DataResponse[InvitationOut])
async def open_invitation(token: str, services: Services = Depends(get_services)):
    """Record that the vendor opened the link (REQUESTED -> AWAITING_RESPONSE)."""
    request = await services.requests.open_invitation(token, VENDOR_ACTOR)
    return {"data": InvitationOut.model_validate(request)}


@router.post("/onboarding/{token}", response_model=DataResponse[SubmissionOut])
async def submit_onboarding(
    token: str,
    body: OnboardingSubmit,
    services: Services = Depends(get_services),
):
    result = await services.onboarding.submit(token, body, VENDOR_ACTOR)
    return {
        "data": SubmissionOut(
            onboarding=OnboardingOut.model_validate(result.onboarding),
            status=result.status.value,
            issues=[ValidationIssueOut.model_validate(i) for i in result.issues],
            follow_ups=[FollowUpOut.model_validate(f) for f in result.follow_ups],
        )
    }


@router.get("/onboarding/{token}", response_model=DataResponse[OnboardingOut])
async def get_onboarding(token: str, services: Services = Depends(get_services)):
    onboarding = await services.onboarding.get_for_token(token)
    return {"data": OnboardingOut.model_validate(onboarding)}
