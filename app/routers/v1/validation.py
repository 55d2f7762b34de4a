"""Procurement-side validation issue router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.response import DataResponse
from app.routers.deps import get_actor, get_services
from app.schemas.follow_up import (
    BulkIssueResolve,
    BulkResolveResult,
    IssueCounts,
    IssueResolve,
    ValidationIssueOut,
)
from app.services.factory import Services

router = APIRouter(prefix="/procurement", tags=["Procurement: Validation"])


@router.post("/onboardings/{onboarding_id}/validate", response_model=DataResponse[list[ValidationIssueOut]])
async def revalidate_onboarding(
    onboarding_id: str,
    services: Services = Depends(get_services),
):
    """Run the rule evaluator again; returns the issues recorded by this run."""
    issues = await services.onboarding.revalidate(onboarding_id)
    return {"data": [ValidationIssueOut.model_validate(i) for i in issues]}


@router.get("/onboardings/{onboarding_id}/issues", response_model=DataResponse[list[ValidationIssueOut]])
async def list_issues(
    onboarding_id: str,
    open_only: Optional[bool] = Query(default=True, alias="openOnly"),
    services: Services = Depends(get_services),
):
    await services.onboarding.get(onboarding_id)
    if open_only:
        issues = await services.validation.get_open_issues(onboarding_id)
    else:
        issues = await services.validation.get_issues(onboarding_id)
    return {"data": [ValidationIssueOut.model_validate(i) for i in issues]}


@router.get("/onboardings/{onboarding_id}/issues/count", response_model=DataResponse[IssueCounts])
async def count_issues(
    onboarding_id: str,
    services: Services = Depends(get_services),
):
    await services.onboarding.get(onboarding_id)
    return {
        "data": IssueCounts(
            open=await services.validation.count_open(onboarding_id),
            critical=await services.validation.count_critical(onboarding_id),
        )
    }


@router.post("/issues/resolve-bulk", response_model=DataResponse[BulkResolveResult])
async def resolve_issues_bulk(
    body: BulkIssueResolve,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    resolved = await services.validation.resolve_bulk(body.issue_ids, actor, body.notes)
    return {"data": BulkResolveResult(resolved=resolved, requested=len(body.issue_ids))}


@router.post("/issues/{issue_id}/resolve", response_model=DataResponse[ValidationIssueOut])
async def resolve_issue(
    issue_id: str,
    body: IssueResolve | None = None,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    notes = body.notes if body is not None else None
    issue = await services.validation.resolve_issue(issue_id, actor, notes)
    return {"data": ValidationIssueOut.model_validate(issue)}
