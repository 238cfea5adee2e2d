from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from loanhub.core.config import settings
from loanhub.core.db import get_db
from loanhub.models.user import User


@dataclass
class CurrentUser:
    id: str
    name: str = "User"
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(user_id: int | str, expires_minutes: int | None = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRES_MINUTES
    payload = {
        "userId": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


def get_current_user_id(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise _unauthorized("Authentication failed - No token provided")

    parts = auth_header.split(" ")
    token = parts[1] if len(parts) > 1 else ""
    if not token:
        raise _unauthorized("Authentication failed - Invalid token format")

    try:
        decoded = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Session expired - Please login again")
    except jwt.InvalidTokenError:
        raise _unauthorized("Authentication failed - Invalid token")

    user_id = decoded.get("userId")
    if user_id is None:
        raise _unauthorized("Authentication failed - Invalid token")
    return str(user_id)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> CurrentUser:
    # unknown ids keep the default "user" identity
    user = db.get(User, int(user_id)) if user_id.isdigit() else None
    if not user or not user.is_active:
        return CurrentUser(id=user_id)
    return CurrentUser(id=user_id, name=user.user_name, role=user.role)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
