# requisition/services/auth_service.py
"""
Password hashing (bcrypt), JWT access tokens (python-jose), and the
register/login operations behind the /auth endpoints.
"""

from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from requisition.config import Settings
from requisition.exceptions import DuplicateEmail, Unauthorized
from requisition.models.user import User, UserRole
from requisition.schemas.user import UserRegister
from requisition.utils.logger import get_logger

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"[AUTH] Unreadable password hash: {e}")
        return False


def create_access_token(user: User, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode a JWT access token. Returns None if invalid or expired."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"[AUTH] Token decode failed: {e}")
        return None
    if payload.get("type") != "access":
        return None
    return payload


def _email_taken(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def register_user(db: Session, body: UserRegister, role: UserRole = UserRole.EMPLOYEE) -> User:
    if _email_taken(db, body.email):
        raise DuplicateEmail()
    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[AUTH] Email {body.email} registered concurrently: {e.orig}")
        raise DuplicateEmail() from e
    db.refresh(user)
    logger.info(f"[AUTH] Registered {user.role} {user.email} (id={user.id})")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning(f"[AUTH] Failed login for {email}")
        raise Unauthorized("Invalid email or password")
    return user
