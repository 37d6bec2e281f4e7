from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from campus_events.db.database import get_db
from campus_events.core.exceptions import AuthenticationError, Forbidden
from campus_events.core.security import decode_token
from campus_events.models.user import User
from campus_events.schemas.auth import TokenData
from campus_events import crud

security = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> User:
    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError("Could not validate credentials")

    try:
        token_data = TokenData(user_id=int(subject), role=payload.get("role"))
    except ValueError:
        raise AuthenticationError("Could not validate credentials")

    user = crud.user.get(db, id=token_data.user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")
    return _user_from_token(db, credentials.credentials)


def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not crud.user.is_active(current_user):
        raise Forbidden("Account is deactivated")
    return current_user

