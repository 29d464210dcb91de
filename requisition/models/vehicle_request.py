# requisition/models/vehicle_request.py
"""
Vehicle requests table: an employee's application to use a vehicle for a trip.

Status moves pending → approved | rejected and never leaves a terminal state.
The flattened properties (employee_name, vehicle_number, ...) expose the joined
owner/approval/vehicle data the API returns alongside each request.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from requisition.database import Base
from requisition.exceptions import InvalidStateTransition


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS = {
    RequestStatus.PENDING: {RequestStatus.APPROVED, RequestStatus.REJECTED},
    RequestStatus.APPROVED: set(),
    RequestStatus.REJECTED: set(),
}


def check_transition(current: str, target: str) -> None:
    """Raise InvalidStateTransition unless current → target is a legal move."""
    if RequestStatus(target) not in ALLOWED_TRANSITIONS[RequestStatus(current)]:
        raise InvalidStateTransition(f"Cannot move request from '{current}' to '{target}'")


class VehicleRequest(Base):
    __tablename__ = "vehicle_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    officer_name = Column(String(200), nullable=False)
    designation = Column(String(200), nullable=False)
    required_date = Column(Date, nullable=False)
    required_time = Column(String(5), nullable=False)   # HH:MM
    report_place = Column(String(255), nullable=False)
    places_to_visit = Column(Text, nullable=False)
    journey_purpose = Column(Text, nullable=False)
    release_time = Column(String(5), nullable=False)    # HH:MM
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value, index=True)
    rejection_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee = relationship("User", foreign_keys=[employee_id])
    approval = relationship("Approval", back_populates="request", uselist=False)

    # ── Joined views ─────────────────────────────────────────────────────
    @property
    def employee_name(self):
        return self.employee.name if self.employee else None

    @property
    def employee_email(self):
        return self.employee.email if self.employee else None

    @property
    def vehicle_id(self):
        return self.approval.vehicle_id if self.approval else None

    @property
    def vehicle_number(self):
        return self.approval.vehicle.vehicle_number if self.approval and self.approval.vehicle else None

    @property
    def make_model(self):
        return self.approval.vehicle.make_model if self.approval and self.approval.vehicle else None

    @property
    def driver_name(self):
        return self.approval.vehicle.driver_name if self.approval and self.approval.vehicle else None

    @property
    def approved_by(self):
        return self.approval.approved_by if self.approval else None

    @property
    def approved_by_name(self):
        return self.approval.approver.name if self.approval and self.approval.approver else None

    @property
    def approved_at(self):
        return self.approval.approved_at if self.approval else None

    def __repr__(self):
        return f"<VehicleRequest {self.id} employee={self.employee_id} status={self.status}>"
