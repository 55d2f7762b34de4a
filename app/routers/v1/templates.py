"""Procurement-side follow-up template router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.exceptions import parse_enum
from app.core.response import DataResponse
from app.domain.enums import FollowUpType
from app.routers.deps import get_actor, get_services
from app.schemas.follow_up import (
    TemplateCreate,
    TemplateOut,
    TemplatePreview,
    TemplatePreviewRequest,
    TemplateUpdate,
)
from app.services.factory import Services

router = APIRouter(prefix="/procurement/templates", tags=["Procurement: Templates"])


@router.get("", response_model=DataResponse[list[TemplateOut]])
async def list_templates(
    follow_up_type: Optional[str] = Query(default=None, alias="type"),
    services: Services = Depends(get_services),
):
    """Active templates, optionally for one follow-up type."""
    if follow_up_type:
        items = await services.templates.list_by_type(
            parse_enum(FollowUpType, follow_up_type, "follow-up type")
        )
    else:
        items = await services.templates.list_active()
    return {"data": [TemplateOut.model_validate(t) for t in items]}


@router.post("", response_model=DataResponse[TemplateOut], status_code=status.HTTP_201_CREATED)
async def create_template(
    body: TemplateCreate,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    template = await services.templates.create(body.model_dump(), actor)
    return {"data": TemplateOut.model_validate(template)}


@router.get("/{template_id}", response_model=DataResponse[TemplateOut])
async def get_template(template_id: str, services: Services = Depends(get_services)):
    template = await services.templates.get(template_id)
    return {"data": TemplateOut.model_validate(template)}


@router.put("/{template_id}", response_model=DataResponse[TemplateOut])
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    services: Services = Depends(get_services),
):
    template = await services.templates.update(template_id, body.model_dump(exclude_unset=True))
    return {"data": TemplateOut.model_validate(template)}


@router.delete("/{template_id}", response_model=DataResponse[TemplateOut])
async def deactivate_template(template_id: str, services: Services = Depends(get_services)):
    """Templates are deactivated, never deleted."""
    template = await services.templates.deactivate(template_id)
    return {"data": TemplateOut.model_validate(template)}


@router.post("/{template_id}/preview", response_model=DataResponse[TemplatePreview])
async def preview_template(
    template_id: str,
    body: TemplatePreviewRequest,
    services: Services = Depends(get_services),
):
    """Render subject and body against an onboarding's current open issues."""
    template = await services.templates.get(template_id)
    onboarding = await services.onboarding.get(body.onboarding_id)
    issues = await services.validation.get_open_issues(onboarding.id)
    return {
        "data": TemplatePreview(
            subject=services.templates.render_subject(template, onboarding, issues),
            body=services.templates.render_template(template, onboarding, issues),
        )
    }
