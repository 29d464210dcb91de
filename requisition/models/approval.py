# requisition/models/approval.py
"""
Approved requests table: the permanent record of which vehicle served which
request and who approved it. One row per approved request, never updated.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from requisition.database import Base


class Approval(Base):
    __tablename__ = "approved_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(Integer, ForeignKey("vehicle_requests.id"), unique=True, nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    approved_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    request = relationship("VehicleRequest", back_populates="approval")
    vehicle = relationship("Vehicle")
    approver = relationship("User", foreign_keys=[approved_by])

    def __repr__(self):
        return f"<Approval request={self.request_id} vehicle={self.vehicle_id} by={self.approved_by}>"
