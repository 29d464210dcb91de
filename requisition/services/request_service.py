# requisition/services/request_service.py
"""
Request lifecycle engine.

Owns the pending → approved | rejected state machine and the approval
transaction. Approve and reject both guard the status column with a
compare-and-swap (UPDATE ... WHERE id = :id AND status = 'pending'); that
guard is the only concurrency control for racing decisions. Of two racing
calls exactly one sees a matched row, the other gets NotFoundOrNotPending.
With MARK_VEHICLE_UNAVAILABLE_ON_APPROVAL on, the vehicle is claimed the same
way (WHERE is_available), so two approvals cannot take one vehicle.

Notifications are scheduled only after commit and can never fail or roll
back the operation.
"""

import math
from datetime import datetime, timedelta
from typing import Optional, Union

import pydantic
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from requisition.config import Settings
from requisition.exceptions import (
    InternalFailure,
    NotFoundOrNotPending,
    RequestNotFound,
    ValidationError,
    VehicleUnavailable,
)
from requisition.models.approval import Approval
from requisition.models.vehicle import Vehicle
from requisition.models.vehicle_request import RequestStatus, VehicleRequest, check_transition
from requisition.schemas.vehicle_request import VehicleRequestCreate
from requisition.utils.logger import get_logger

logger = get_logger(__name__)

RECENT_WINDOW = timedelta(days=7)


def _joined():
    """Eager-load owner, approval, assigned vehicle and approving admin."""
    return (
        joinedload(VehicleRequest.employee),
        joinedload(VehicleRequest.approval).joinedload(Approval.vehicle),
        joinedload(VehicleRequest.approval).joinedload(Approval.approver),
    )


def validation_error_from(exc: pydantic.ValidationError) -> ValidationError:
    errors = [
        {"field": str(err["loc"][-1]) if err["loc"] else "unknown", "msg": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationError(details=errors)


class RequestService:
    def __init__(self, db: Session, notifier, settings: Settings):
        self.db = db
        self.notifier = notifier
        self.settings = settings

    # ── Commands ─────────────────────────────────────────────────────────
    def submit(self, employee_id: int, fields: Union[VehicleRequestCreate, dict]) -> VehicleRequest:
        if not isinstance(fields, VehicleRequestCreate):
            try:
                fields = VehicleRequestCreate.model_validate(fields)
            except pydantic.ValidationError as e:
                raise validation_error_from(e) from e

        request = VehicleRequest(
            employee_id=employee_id,
            status=RequestStatus.PENDING.value,
            **fields.model_dump(),
        )
        self.db.add(request)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[REQUEST] Insert failed for employee {employee_id}: {e}")
            raise InternalFailure("Server error submitting request") from e

        created = self.get(request.id)
        logger.info(f"[REQUEST] #{created.id} submitted by employee {employee_id}")
        self._notify(self.notifier.notify_new_request, _payload(created))
        return created

    def approve(self, request_id: int, vehicle_id: int, admin_id: int) -> VehicleRequest:
        db = self.db
        try:
            request = db.get(VehicleRequest, request_id)
            if request is None or request.status != RequestStatus.PENDING.value:
                raise NotFoundOrNotPending()
            check_transition(request.status, RequestStatus.APPROVED.value)

            vehicle = (
                db.query(Vehicle)
                .filter(Vehicle.id == vehicle_id, Vehicle.is_available.is_(True))
                .first()
            )
            if vehicle is None:
                raise VehicleUnavailable()

            self._swap_status(request_id, RequestStatus.APPROVED, {})
            db.add(Approval(
                request_id=request_id,
                vehicle_id=vehicle_id,
                approved_by=admin_id,
                approved_at=datetime.utcnow(),
            ))
            db.flush()

            if self.settings.MARK_VEHICLE_UNAVAILABLE_ON_APPROVAL:
                self._claim_vehicle(vehicle_id)

            vehicle_info = {
                "vehicle_number": vehicle.vehicle_number,
                "make_model": vehicle.make_model,
                "driver_name": vehicle.driver_name,
            }
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"[REQUEST] #{request_id} already has an approval record: {e.orig}")
            raise NotFoundOrNotPending() from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[REQUEST] Approve #{request_id} failed, rolled back: {e}")
            raise InternalFailure("Server error approving request") from e
        except Exception:
            db.rollback()
            raise

        approved = self.get(request_id)
        logger.info(f"[REQUEST] #{request_id} approved by admin {admin_id} with vehicle {vehicle_id}")
        self._notify(self.notifier.notify_status_change, _payload(approved), "approved", vehicle_info)
        return approved

    def reject(self, request_id: int, reason: Optional[str], admin_id: int) -> VehicleRequest:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(details=[{"field": "rejection_reason", "msg": "Rejection reason is required"}])

        db = self.db
        try:
            request = db.get(VehicleRequest, request_id)
            if request is None or request.status != RequestStatus.PENDING.value:
                raise NotFoundOrNotPending()
            check_transition(request.status, RequestStatus.REJECTED.value)

            self._swap_status(request_id, RequestStatus.REJECTED, {VehicleRequest.rejection_reason: reason})
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[REQUEST] Reject #{request_id} failed, rolled back: {e}")
            raise InternalFailure("Server error rejecting request") from e
        except Exception:
            db.rollback()
            raise

        rejected = self.get(request_id)
        logger.info(f"[REQUEST] #{request_id} rejected by admin {admin_id}")
        self._notify(self.notifier.notify_status_change, _payload(rejected), "rejected")
        return rejected

    # ── Queries ──────────────────────────────────────────────────────────
    def get(self, request_id: int) -> VehicleRequest:
        request = (
            self.db.query(VehicleRequest)
            .options(*_joined())
            .filter(VehicleRequest.id == request_id)
            .populate_existing()
            .first()
        )
        if request is None:
            raise RequestNotFound()
        return request

    def list_for_employee(self, employee_id: int):
        return (
            self.db.query(VehicleRequest)
            .options(*_joined())
            .filter(VehicleRequest.employee_id == employee_id)
            .order_by(VehicleRequest.created_at.desc(), VehicleRequest.id.desc())
            .all()
        )

    def list_all(self, status: Optional[str] = None, page: int = 1, page_size: int = 10):
        """Returns (rows, pagination dict) for one page, newest first."""
        if page < 1 or page_size < 1:
            raise ValidationError(details=[{"field": "page", "msg": "page and limit must be positive integers"}])

        q = self.db.query(VehicleRequest)
        count_q = self.db.query(func.count(VehicleRequest.id))
        if status:
            q = q.filter(VehicleRequest.status == status)
            count_q = count_q.filter(VehicleRequest.status == status)

        rows = (
            q.options(*_joined())
            .order_by(VehicleRequest.created_at.desc(), VehicleRequest.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        total = count_q.scalar() or 0
        pagination = {
            "page": page,
            "limit": page_size,
            "total": total,
            "pages": math.ceil(total / page_size),
        }
        return rows, pagination

    def dashboard_stats(self) -> dict:
        counts = dict(
            self.db.query(VehicleRequest.status, func.count(VehicleRequest.id))
            .group_by(VehicleRequest.status)
            .all()
        )
        total_vehicles, available = self.db.query(
            func.count(Vehicle.id),
            func.sum(case((Vehicle.is_available.is_(True), 1), else_=0)),
        ).one()
        total_vehicles = total_vehicles or 0
        available = int(available or 0)
        recent = (
            self.db.query(func.count(VehicleRequest.id))
            .filter(VehicleRequest.created_at >= datetime.utcnow() - RECENT_WINDOW)
            .scalar()
        ) or 0

        return {
            "requests": {
                "total": sum(counts.values()),
                "pending": counts.get(RequestStatus.PENDING.value, 0),
                "approved": counts.get(RequestStatus.APPROVED.value, 0),
                "rejected": counts.get(RequestStatus.REJECTED.value, 0),
            },
            "vehicles": {
                "total": total_vehicles,
                "available": available,
                "assigned": total_vehicles - available,
            },
            "recentRequests": recent,
        }

    # ── Internals ────────────────────────────────────────────────────────
    def _swap_status(self, request_id: int, target: RequestStatus, extra: dict):
        """Compare-and-swap pending → target. Zero matched rows means another decision won."""
        values = {VehicleRequest.status: target.value, VehicleRequest.updated_at: datetime.utcnow()}
        values.update(extra)
        matched = (
            self.db.query(VehicleRequest)
            .filter(VehicleRequest.id == request_id,
                    VehicleRequest.status == RequestStatus.PENDING.value)
            .update(values, synchronize_session=False)
        )
        if matched != 1:
            raise NotFoundOrNotPending()

    def _claim_vehicle(self, vehicle_id: int):
        """Compare-and-swap available -> unavailable. Zero matched rows means another approval took it."""
        matched = (
            self.db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id, Vehicle.is_available.is_(True))
            .update({Vehicle.is_available: False, Vehicle.updated_at: datetime.utcnow()},
                    synchronize_session=False)
        )
        if matched != 1:
            raise VehicleUnavailable()

    def _notify(self, send, *args):
        try:
            send(*args)
        except Exception as e:
            logger.error(f"[EMAIL] Notification could not be scheduled: {e}")


def _payload(request: VehicleRequest) -> dict:
    """Plain snapshot of a request for the mail thread (ORM objects stay on this session)."""
    return {
        "id": request.id,
        "officer_name": request.officer_name,
        "designation": request.designation,
        "required_date": request.required_date.isoformat() if request.required_date else None,
        "required_time": request.required_time,
        "report_place": request.report_place,
        "places_to_visit": request.places_to_visit,
        "journey_purpose": request.journey_purpose,
        "release_time": request.release_time,
        "status": request.status,
        "rejection_reason": request.rejection_reason,
        "employee_email": request.employee_email,
        "employee_name": request.employee_name,
    }
