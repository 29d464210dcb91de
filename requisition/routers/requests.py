# requisition/routers/requests.py
"""Vehicle requests: employee submission, admin review, dashboard statistics."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from requisition.config import settings
from requisition.dependencies import get_request_service, require_admin, require_employee
from requisition.models.user import User
from requisition.models.vehicle_request import RequestStatus
from requisition.schemas.vehicle_request import (
    ApproveBody,
    DashboardStats,
    Pagination,
    RejectBody,
    VehicleRequestCreate,
    VehicleRequestOut,
)
from requisition.services.request_service import RequestService

router = APIRouter()


def _out(request) -> VehicleRequestOut:
    return VehicleRequestOut.model_validate(request)


@router.post("/requests", status_code=201, summary="Employee: submit a vehicle request")
def submit_request(
    body: VehicleRequestCreate,
    user: User = Depends(require_employee),
    service: RequestService = Depends(get_request_service),
):
    created = service.submit(user.id, body)
    return {"message": "Vehicle request submitted successfully", "request": _out(created)}


@router.get("/requests/my-requests", summary="Employee: list own requests")
def my_requests(
    user: User = Depends(require_employee),
    service: RequestService = Depends(get_request_service),
):
    return {"requests": [_out(r) for r in service.list_for_employee(user.id)]}


@router.get("/requests/stats/dashboard", summary="Admin: dashboard statistics")
def dashboard_stats(
    _: User = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
):
    return {"stats": DashboardStats(**service.dashboard_stats())}


@router.get("/requests", summary="Admin: list all requests, filterable by status")
def list_requests(
    status: Optional[RequestStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
):
    rows, pagination = service.list_all(status.value if status else None, page, limit)
    return {"requests": [_out(r) for r in rows], "pagination": Pagination(**pagination)}


@router.get("/requests/{request_id}", summary="Admin: get one request")
def get_request(
    request_id: int,
    _: User = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
):
    return {"request": _out(service.get(request_id))}


@router.post("/requests/{request_id}/approve", summary="Admin: approve and assign a vehicle")
def approve_request(
    request_id: int,
    body: ApproveBody,
    admin: User = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
):
    approved = service.approve(request_id, body.vehicle_id, admin.id)
    return {"message": "Request approved successfully", "request": _out(approved)}


@router.post("/requests/{request_id}/reject", summary="Admin: reject with a reason")
def reject_request(
    request_id: int,
    body: RejectBody,
    admin: User = Depends(require_admin),
    service: RequestService = Depends(get_request_service),
):
    rejected = service.reject(request_id, body.rejection_reason, admin.id)
    return {"message": "Request rejected successfully", "request": _out(rejected)}
