"""Procurement-side vendor request router.

Pattern shared by all v1 routers:
  1. Declare a router with prefix and tags
  2. Inject the per-request Services bundle + actor via Depends
  3. Call service methods and wrap the result in the response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.routers.deps import get_actor, get_monitor, get_services
from app.schemas.notification import ScanSummaryOut
from app.schemas.onboarding import OnboardingOut
from app.schemas.vendor import (
    ActivityLogOut,
    StatusUpdate,
    VendorAnalyticsOut,
    VendorRequestCreate,
    VendorRequestOut,
)
from app.services.factory import Services
from app.services.monitor import UnresponsiveVendorMonitor

router = APIRouter(prefix="/procurement", tags=["Procurement: Vendors"])


@router.get("/vendors", response_model=ListResponse[VendorRequestOut])
async def list_vendor_requests(
    filter_status: Optional[str] = Query(default=None, alias="status", description="Filter by status"),
    pagination: PaginationParams = Depends(),
    services: Services = Depends(get_services),
):
    """List active vendor requests (paginated). Filter by ?status=REQUESTED|MISSING_DATA|..."""
    items, total = await services.requests.list_requests(pagination, status=filter_status)
    return paginated(
        [VendorRequestOut.model_validate(v) for v in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/vendors", response_model=DataResponse[VendorRequestOut], status_code=status.HTTP_201_CREATED)
async def create_vendor_request(
    body: VendorRequestCreate,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    """Invite a new vendor; the invitation email goes out after commit."""
    request = await services.requests.create_vendor_request(body, actor)
    return {"data": VendorRequestOut.model_validate(request)}


@router.get("/vendors/deleted", response_model=DataResponse[list[VendorRequestOut]])
async def list_deleted_vendor_requests(services: Services = Depends(get_services)):
    items = await services.requests.list_deleted()
    return {"data": [VendorRequestOut.model_validate(v) for v in items]}


@router.get("/vendors/by-email", response_model=DataResponse[VendorRequestOut])
async def get_vendor_request_by_email(
    email: str = Query(..., min_length=3),
    services: Services = Depends(get_services),
):
    request = await services.requests.get_by_email(email)
    return {"data": VendorRequestOut.model_validate(request)}


@router.get("/vendors/{request_id}", response_model=DataResponse[VendorRequestOut])
async def get_vendor_request(
    request_id: str,
    services: Services = Depends(get_services),
):
    request = await services.requests.get_request(request_id)
    return {"data": VendorRequestOut.model_validate(request)}


@router.patch("/vendors/{request_id}/status", response_model=DataResponse[VendorRequestOut])
async def update_vendor_status(
    request_id: str,
    body: StatusUpdate,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    """Move the request to any status (the workflow does not restrict transitions)."""
    request = await services.requests.transition(request_id, body.status, actor)
    return {"data": VendorRequestOut.model_validate(request)}


@router.delete("/vendors/{request_id}", response_model=DataResponse[VendorRequestOut])
async def delete_vendor_request(
    request_id: str,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    """Soft delete: status DELETED, row kept and restorable."""
    request = await services.requests.soft_delete(request_id, actor)
    return {"data": VendorRequestOut.model_validate(request)}


@router.post("/vendors/{request_id}/restore", response_model=DataResponse[VendorRequestOut])
async def restore_vendor_request(
    request_id: str,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    request = await services.requests.restore(request_id, actor)
    return {"data": VendorRequestOut.model_validate(request)}


@router.post("/vendors/{request_id}/resend-invitation", response_model=DataResponse[VendorRequestOut])
async def resend_invitation(
    request_id: str,
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    request = await services.requests.resend_invitation(request_id, actor)
    return {"data": VendorRequestOut.model_validate(request)}


@router.get("/vendors/{request_id}/onboarding", response_model=DataResponse[OnboardingOut])
async def get_vendor_onboarding(
    request_id: str,
    services: Services = Depends(get_services),
):
    onboarding = await services.onboarding.get_for_request(request_id)
    return {"data": OnboardingOut.model_validate(onboarding)}


@router.get("/vendors/{request_id}/activity", response_model=DataResponse[list[ActivityLogOut]])
async def get_vendor_activity(
    request_id: str,
    services: Services = Depends(get_services),
):
    await services.requests.get_request(request_id)
    items = await services.activity_log.for_request(request_id)
    return {"data": [ActivityLogOut.model_validate(a) for a in items]}


@router.get("/activity", response_model=DataResponse[list[ActivityLogOut]])
async def get_recent_activity(
    limit: int = Query(default=50, ge=1, le=500),
    services: Services = Depends(get_services),
):
    items = await services.activity_log.recent(limit)
    return {"data": [ActivityLogOut.model_validate(a) for a in items]}


@router.post("/check-unresponsive-vendors", response_model=DataResponse[ScanSummaryOut])
async def check_unresponsive_vendors(
    monitor: UnresponsiveVendorMonitor = Depends(get_monitor),
):
    """Run the unresponsive-vendor scan now (same code path as the daily job)."""
    summary = await monitor.run_unresponsive_scan()
    return {"data": ScanSummaryOut.model_validate(summary)}


@router.get("/analytics", response_model=DataResponse[VendorAnalyticsOut])
async def get_vendor_analytics(services: Services = Depends(get_services)):
    """Status breakdown plus daily activity for the last 7 days."""
    analytics = await services.analytics.vendor_analytics()
    return {"data": VendorAnalyticsOut.model_validate(analytics)}
