from typing import Any, Dict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campus_events import crud, schemas
from campus_events.api import deps
from campus_events.core.exceptions import NotFound
from campus_events.db.database import get_db
from campus_events.models.user import User
from campus_events.services import analytics as analytics_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/profile", response_model=schemas.User)
def read_profile(
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    return current_user


@router.put("/profile", response_model=schemas.User)
def update_profile(
    *,
    db: Session = Depends(get_db),
    profile_in: schemas.UserProfileUpdate,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Update the caller's own name, phone number and picture"""
    user = crud.user.update(db, db_obj=current_user, obj_in=profile_in)
    logger.info(f"Profile updated for user {user.id}")
    return user


@router.get("/organizer/dashboard", response_model=Dict[str, Any])
def read_organizer_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    return analytics_service.organizer_dashboard(db, organizer=current_user)


@router.get("/organizer/events/{event_id}/analytics", response_model=Dict[str, Any])
def read_event_analytics(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    return analytics_service.event_analytics(db, actor=current_user, event_id=event_id)


@router.get("/{user_id}", response_model=schemas.User)
def read_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    user = crud.user.get(db, id=user_id)
    if not user:
        raise NotFound("User not found")
    return user
