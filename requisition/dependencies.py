# requisition/dependencies.py
"""
FastAPI dependencies: bearer-token authentication, role guards, and the
per-request RequestService wired with the app-scoped notifier.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from requisition.config import Settings
from requisition.database import get_db
from requisition.exceptions import Forbidden, Unauthorized
from requisition.models.user import User, UserRole
from requisition.services.auth_service import decode_access_token
from requisition.services.request_service import RequestService

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_notifier(request: Request):
    return request.app.state.notifier


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None:
        raise Unauthorized("Access token required")

    payload = decode_access_token(credentials.credentials, settings)
    if payload is None:
        raise Unauthorized("Invalid or expired token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token subject")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("User not found")
    return user


def require_role(role: UserRole):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role.value:
            raise Forbidden(f"{role.value.capitalize()} access required")
        return current_user
    return role_checker


require_admin = require_role(UserRole.ADMIN)
require_employee = require_role(UserRole.EMPLOYEE)


def get_request_service(
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> RequestService:
    return RequestService(db, notifier, settings)
