# requisition/models/vehicle.py
"""
Vehicles table: the pool of assignable vehicles and their drivers.
vehicle_number is unique. A vehicle referenced by any approval cannot be deleted.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from requisition.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    make_model = Column(String(200), nullable=False)
    driver_name = Column(String(200), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Vehicle {self.vehicle_number} driver={self.driver_name} available={self.is_available}>"
