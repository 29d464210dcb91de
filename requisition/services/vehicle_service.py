# requisition/services/vehicle_service.py
"""
Vehicle registry: CRUD over the vehicle pool.
Guards: vehicle_number is unique, and a vehicle that appears in any
approval record can never be deleted.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from requisition.models.vehicle import Vehicle
from requisition.models.approval import Approval
from requisition.schemas.vehicle import VehicleCreate, VehicleUpdate
from requisition.exceptions import DuplicateVehicleNumber, VehicleInUse, VehicleNotFound
from requisition.utils.logger import get_logger

logger = get_logger(__name__)


def list_vehicles(db: Session):
    return db.query(Vehicle).order_by(Vehicle.vehicle_number).all()


def list_available_vehicles(db: Session):
    return (
        db.query(Vehicle)
        .filter(Vehicle.is_available.is_(True))
        .order_by(Vehicle.vehicle_number)
        .all()
    )


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is None:
        raise VehicleNotFound()
    return vehicle


def _number_taken(db: Session, vehicle_number: str, exclude_id: int = None) -> bool:
    q = db.query(Vehicle.id).filter(Vehicle.vehicle_number == vehicle_number)
    if exclude_id is not None:
        q = q.filter(Vehicle.id != exclude_id)
    return q.first() is not None


def _commit_unique(db: Session) -> None:
    """Commit, reporting a vehicle_number that was taken since the check as a duplicate."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[VEHICLE] Duplicate vehicle number on commit: {e.orig}")
        raise DuplicateVehicleNumber() from e


def create_vehicle(db: Session, body: VehicleCreate) -> Vehicle:
    if _number_taken(db, body.vehicle_number):
        raise DuplicateVehicleNumber()

    vehicle = Vehicle(
        vehicle_number=body.vehicle_number,
        make_model=body.make_model,
        driver_name=body.driver_name,
        is_available=body.is_available,
    )
    db.add(vehicle)
    _commit_unique(db)
    db.refresh(vehicle)
    logger.info(f"[VEHICLE] Added {vehicle.vehicle_number} (id={vehicle.id})")
    return vehicle


def update_vehicle(db: Session, vehicle_id: int, body: VehicleUpdate) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    if _number_taken(db, body.vehicle_number, exclude_id=vehicle_id):
        raise DuplicateVehicleNumber()

    vehicle.vehicle_number = body.vehicle_number
    vehicle.make_model = body.make_model
    vehicle.driver_name = body.driver_name
    if body.is_available is not None:
        vehicle.is_available = body.is_available
    _commit_unique(db)
    db.refresh(vehicle)
    logger.info(f"[VEHICLE] Updated {vehicle.vehicle_number} (id={vehicle.id})")
    return vehicle


def is_assigned(db: Session, vehicle_id: int) -> bool:
    """True if any approval record references the vehicle."""
    return db.query(Approval.id).filter(Approval.vehicle_id == vehicle_id).first() is not None


def delete_vehicle(db: Session, vehicle_id: int) -> None:
    vehicle = get_vehicle(db, vehicle_id)
    if is_assigned(db, vehicle_id):
        raise VehicleInUse()

    vehicle_number = vehicle.vehicle_number
    db.delete(vehicle)
    db.commit()
    logger.info(f"[VEHICLE] Deleted {vehicle_number} (id={vehicle_id})")
