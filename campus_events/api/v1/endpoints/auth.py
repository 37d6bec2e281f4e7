from datetime import timedelta
from typing import Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from campus_events import crud, schemas
from campus_events.api import deps
from campus_events.core import security
from campus_events.core.config import settings
from campus_events.core.exceptions import AuthenticationError, Conflict, Forbidden, ValidationError
from campus_events.db.database import get_db
from campus_events.models.user import User, UserRole
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _token_for(user: User) -> schemas.Token:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(
        user.id, role=user.role.value, expires_delta=access_token_expires
    )
    return schemas.Token(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        role=user.role,
    )


@router.post("/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: schemas.UserCreate
) -> Any:
    """Register a student or organizer account"""
    if crud.user.get_by_email(db, email=user_in.email):
        raise Conflict("User already exists with this email")

    if user_in.role == UserRole.ORGANIZER:
        if user_in.organization_id is None:
            raise ValidationError("Organizers must select an organization")
        organization = crud.organization.get(db, id=user_in.organization_id)
        if not organization or not organization.is_active:
            raise ValidationError("Organization not found")

    user = crud.user.create(db, obj_in=user_in)
    logger.info(f"Registered {user.role.value} {user.email} (id={user.id})")
    return _token_for(user)


@router.post("/login", response_model=schemas.Token)
def login(
    *,
    db: Session = Depends(get_db),
    credentials: schemas.LoginRequest
) -> Any:
    """Email and password login returning a bearer token"""
    user = crud.user.authenticate(db, email=credentials.email, password=credentials.password)
    if not user:
        logger.info(f"Failed login for {credentials.email}")
        raise AuthenticationError("Invalid credentials")
    if not crud.user.is_active(user):
        raise Forbidden("Account is deactivated")

    return _token_for(user)


@router.get("/me", response_model=schemas.User)
def read_current_user(
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    return current_user
