# requisition/routers/vehicles.py
"""Vehicle registry: admin CRUD over the vehicle pool."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from requisition.database import get_db
from requisition.dependencies import require_admin
from requisition.models.user import User
from requisition.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from requisition.services import vehicle_service

router = APIRouter()


@router.get("/vehicles", summary="List all vehicles")
def list_vehicles(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"vehicles": [VehicleOut.model_validate(v) for v in vehicle_service.list_vehicles(db)]}


@router.get("/vehicles/available", summary="List available vehicles")
def list_available(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    vehicles = vehicle_service.list_available_vehicles(db)
    return {"vehicles": [VehicleOut.model_validate(v) for v in vehicles]}


@router.get("/vehicles/{vehicle_id}", summary="Get one vehicle")
def get_vehicle(vehicle_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"vehicle": VehicleOut.model_validate(vehicle_service.get_vehicle(db, vehicle_id))}


@router.post("/vehicles", status_code=201, summary="Add a vehicle")
def add_vehicle(body: VehicleCreate, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    vehicle = vehicle_service.create_vehicle(db, body)
    return {"message": "Vehicle added successfully", "vehicle": VehicleOut.model_validate(vehicle)}


@router.put("/vehicles/{vehicle_id}", summary="Update a vehicle")
def update_vehicle(
    vehicle_id: int,
    body: VehicleUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    vehicle = vehicle_service.update_vehicle(db, vehicle_id, body)
    return {"message": "Vehicle updated successfully", "vehicle": VehicleOut.model_validate(vehicle)}


@router.delete("/vehicles/{vehicle_id}", summary="Delete an unassigned vehicle")
def delete_vehicle(vehicle_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    vehicle_service.delete_vehicle(db, vehicle_id)
    return {"message": "Vehicle deleted successfully"}
