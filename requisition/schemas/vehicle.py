# requisition/schemas/vehicle.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional


class VehicleCreate(BaseModel):
    vehicle_number: str
    make_model: str
    driver_name: str
    is_available: bool = True

    @field_validator("vehicle_number", "make_model", "driver_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class VehicleUpdate(VehicleCreate):
    is_available: Optional[bool] = None   # Unchanged when omitted


class VehicleOut(BaseModel):
    id: int
    vehicle_number: str
    make_model: str
    driver_name: str
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
