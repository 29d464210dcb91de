# requisition/schemas/vehicle_request.py
"""
Request/response shapes for vehicle requests.
VehicleRequestCreate carries the eight journey fields and normalises them:
text is trimmed and must be non-empty, times accept H:MM or HH:MM and are
stored zero-padded.
"""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def normalise_time(value: str) -> str:
    match = TIME_RE.match(value.strip())
    if not match:
        raise ValueError("must be a valid time (HH:MM)")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


class VehicleRequestCreate(BaseModel):
    officer_name: str
    designation: str
    required_date: date
    required_time: str
    report_place: str
    places_to_visit: str
    journey_purpose: str
    release_time: str

    @field_validator("officer_name", "designation", "report_place", "places_to_visit", "journey_purpose")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("required_time", "release_time")
    @classmethod
    def valid_time(cls, v: str) -> str:
        return normalise_time(v)


class ApproveBody(BaseModel):
    vehicle_id: int = Field(ge=1)


class RejectBody(BaseModel):
    rejection_reason: str

    @field_validator("rejection_reason")
    @classmethod
    def reason_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Rejection reason is required")
        return v


class VehicleRequestOut(BaseModel):
    id: int
    employee_id: int
    officer_name: str
    designation: str
    required_date: date
    required_time: str
    report_place: str
    places_to_visit: str
    journey_purpose: str
    release_time: str
    status: str
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Joined owner / approval / vehicle data
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
    vehicle_id: Optional[int] = None
    vehicle_number: Optional[str] = None
    make_model: Optional[str] = None
    driver_name: Optional[str] = None
    approved_by: Optional[int] = None
    approved_by_name: Optional[str] = None
    approved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class RequestStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class VehicleStats(BaseModel):
    total: int
    available: int
    assigned: int


class DashboardStats(BaseModel):
    requests: RequestStats
    vehicles: VehicleStats
    recentRequests: int
