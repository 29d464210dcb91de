# requisition/routers/auth.py
"""Registration, login and token checks. Tokens are stateless JWTs."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from requisition.config import Settings
from requisition.database import get_db
from requisition.dependencies import get_current_user, get_settings
from requisition.models.user import User
from requisition.schemas.user import TokenOut, UserLogin, UserOut, UserRegister
from requisition.services import auth_service

router = APIRouter()


@router.post("/auth/register", status_code=201, response_model=TokenOut, summary="Register an employee account")
def register(body: UserRegister, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = auth_service.register_user(db, body)
    return {
        "message": "User registered successfully",
        "token": auth_service.create_access_token(user, settings),
        "user": UserOut.model_validate(user),
    }


@router.post("/auth/login", response_model=TokenOut, summary="Exchange credentials for a bearer token")
def login(body: UserLogin, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = auth_service.authenticate(db, body.email, body.password)
    return {
        "message": "Login successful",
        "token": auth_service.create_access_token(user, settings),
        "user": UserOut.model_validate(user),
    }


@router.get("/auth/profile", summary="Current user")
def profile(user: User = Depends(get_current_user)):
    return {"user": UserOut.model_validate(user)}


@router.post("/auth/verify", summary="Check a bearer token")
def verify(user: User = Depends(get_current_user)):
    return {"valid": True, "user": UserOut.model_validate(user)}


@router.post("/auth/logout", summary="Log out (client discards the token)")
def logout(_: User = Depends(get_current_user)):
    return {"message": "Logged out successfully"}
