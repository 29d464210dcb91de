# requisition/exceptions.py
"""
Domain errors raised by the services and mapped to HTTP responses in main.py.
Each error carries its HTTP status and a stable machine-readable code.
"""

from typing import Any, Dict, List, Optional


class RequisitionError(Exception):
    status_code = 400
    error_code = "BUSINESS_ERROR"
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(RequisitionError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Validation errors"


class InvalidStateTransition(RequisitionError):
    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"
    default_message = "Invalid request status transition"


class NotFoundOrNotPending(InvalidStateTransition):
    status_code = 404
    error_code = "NOT_FOUND_OR_NOT_PENDING"
    default_message = "Request not found or not pending"


class RequestNotFound(RequisitionError):
    status_code = 404
    error_code = "REQUEST_NOT_FOUND"
    default_message = "Request not found"


class VehicleNotFound(RequisitionError):
    status_code = 404
    error_code = "VEHICLE_NOT_FOUND"
    default_message = "Vehicle not found"


class VehicleUnavailable(RequisitionError):
    status_code = 400
    error_code = "VEHICLE_UNAVAILABLE"
    default_message = "Vehicle not found or not available"


class VehicleInUse(RequisitionError):
    status_code = 400
    error_code = "VEHICLE_IN_USE"
    default_message = "Cannot delete vehicle. It has been assigned to requests."


class DuplicateVehicleNumber(RequisitionError):
    status_code = 400
    error_code = "DUPLICATE_VEHICLE_NUMBER"
    default_message = "Vehicle with this number already exists"


class DuplicateEmail(RequisitionError):
    status_code = 400
    error_code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists"


class Unauthorized(RequisitionError):
    status_code = 401
    error_code = "AUTH_FAILED"
    default_message = "Could not validate credentials"


class Forbidden(RequisitionError):
    status_code = 403
    error_code = "PERMISSION_DENIED"
    default_message = "Insufficient permissions"


class InternalFailure(RequisitionError):
    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"
