"""Procurement-side follow-up and AI message router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.response import DataResponse
from app.routers.deps import get_actor, get_services
from app.schemas.follow_up import (
    AIFollowUpCreate,
    AIGenerateRequest,
    AIMessageEdit,
    AIMessageHistoryOut,
    AIMessageRating,
    AIUsageStatsOut,
    FollowUpCreate,
    FollowUpMessageUpdate,
    FollowUpOut,
    GeneratedMessageOut,
)
from app.services.factory import Services

router = APIRouter(prefix="/procurement", tags=["Procurement: Follow-ups"])


# ------------------------------------------------------------------
# Follow-ups
# ------------------------------------------------------------------

@router.get("/follow-ups", response_model=DataResponse[list[FollowUpOut]])
async def list_follow_ups(
    filter_status: Optional[str] = Query(default=None, alias="status", description="SENT|PENDING|RESOLVED|ALL"),
    follow_up_type: Optional[str] = Query(default=None, alias="type", description="Follow-up type or ALL"),
    services: Services = Depends(get_services),
):
    items = await services.follow_ups.list_all(filter_status, follow_up_type)
    return {"data": [FollowUpOut.model_validate(f) for f in items]}


@router.get("/onboardings/{onboarding_id}/follow-ups", response_model=DataResponse[list[FollowUpOut]])
async def list_onboarding_follow_ups(
    onboarding_id: str,
    services: Services = Depends(get_services),
):
    items = await services.follow_ups.list_for_onboarding(onboarding_id)
    return {"data": [FollowUpOut.model_validate(f) for f in items]}


@router.post(
    "/onboardings/{onboarding_id}/follow-ups",
    response_model=DataResponse[FollowUpOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_manual_follow_up(
    onboarding_id: str,
    body: FollowUpCreate,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    follow_up = await services.follow_ups.create_manual_follow_up(
        onboarding_id, body.follow_up_type, body.message, body.fields_concerned, actor
    )
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.get("/follow-ups/{follow_up_id}", response_model=DataResponse[FollowUpOut])
async def get_follow_up(follow_up_id: str, services: Services = Depends(get_services)):
    follow_up = await services.follow_ups.get_follow_up(follow_up_id)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.put("/follow-ups/{follow_up_id}/message", response_model=DataResponse[FollowUpOut])
async def update_follow_up_message(
    follow_up_id: str,
    body: FollowUpMessageUpdate,
    services: Services = Depends(get_services),
):
    follow_up = await services.follow_ups.update_message(follow_up_id, body.message)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.post("/follow-ups/{follow_up_id}/send", response_model=DataResponse[FollowUpOut])
async def send_follow_up(follow_up_id: str, services: Services = Depends(get_services)):
    """PENDING -> SENT and email the vendor; on a SENT follow-up this re-sends."""
    follow_up = await services.follow_ups.send_follow_up(follow_up_id)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.post("/follow-ups/{follow_up_id}/read", response_model=DataResponse[FollowUpOut])
async def mark_follow_up_read(follow_up_id: str, services: Services = Depends(get_services)):
    follow_up = await services.follow_ups.mark_read(follow_up_id)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.post("/follow-ups/{follow_up_id}/resolve", response_model=DataResponse[FollowUpOut])
async def resolve_follow_up(follow_up_id: str, services: Services = Depends(get_services)):
    follow_up = await services.follow_ups.resolve_follow_up(follow_up_id)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.post(
    "/follow-ups/{follow_up_id}/escalate",
    response_model=DataResponse[FollowUpOut],
    status_code=status.HTTP_201_CREATED,
)
async def escalate_follow_up(
    follow_up_id: str,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    """Create the next-level follow-up of the same type; returns the new one."""
    follow_up = await services.ai.escalate_follow_up(follow_up_id, actor)
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.get("/follow-ups/{follow_up_id}/ai-history", response_model=DataResponse[list[AIMessageHistoryOut]])
async def get_follow_up_ai_history(follow_up_id: str, services: Services = Depends(get_services)):
    items = await services.ai.history_for_follow_up(follow_up_id)
    return {"data": [AIMessageHistoryOut.model_validate(h) for h in items]}


# ------------------------------------------------------------------
# AI messages
# ------------------------------------------------------------------

@router.post("/ai/generate-message", response_model=DataResponse[GeneratedMessageOut])
async def generate_ai_message(body: AIGenerateRequest, services: Services = Depends(get_services)):
    """Preview a message without creating a follow-up."""
    generated = await services.ai.generate_message(
        body.onboarding_id, body.follow_up_type, body.escalation_level
    )
    return {"data": GeneratedMessageOut.model_validate(generated)}


@router.post("/ai/follow-ups", response_model=DataResponse[FollowUpOut], status_code=status.HTTP_201_CREATED)
async def create_ai_follow_up(
    body: AIFollowUpCreate,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    follow_up = await services.ai.create_ai_follow_up(
        body.onboarding_id,
        body.follow_up_type,
        body.escalation_level,
        actor,
        fields_concerned=body.fields_concerned,
    )
    return {"data": FollowUpOut.model_validate(follow_up)}


@router.put("/ai/history/{history_id}/edit", response_model=DataResponse[AIMessageHistoryOut])
async def mark_ai_message_edited(
    history_id: str,
    body: AIMessageEdit,
    services: Services = Depends(get_services),
):
    history = await services.ai.mark_message_edited(history_id, body.edited_message)
    return {"data": AIMessageHistoryOut.model_validate(history)}


@router.post("/ai/history/{history_id}/rate", response_model=DataResponse[AIMessageHistoryOut])
async def rate_ai_message(
    history_id: str,
    body: AIMessageRating,
    services: Services = Depends(get_services),
):
    history = await services.ai.rate_message(history_id, body.rating, body.feedback)
    return {"data": AIMessageHistoryOut.model_validate(history)}


@router.get("/ai/stats", response_model=DataResponse[AIUsageStatsOut])
async def get_ai_usage_stats(services: Services = Depends(get_services)):
    stats = await services.ai.usage_stats()
    return {"data": AIUsageStatsOut.model_validate(stats)}
