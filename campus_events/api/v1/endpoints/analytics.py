from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from campus_events.api import deps
from campus_events.db.database import get_db
from campus_events.models.user import User
from campus_events.services import analytics as analytics_service

router = APIRouter()


@router.get("/events", response_model=Dict[str, Any])
def read_events_analytics(
    db: Session = Depends(get_db),
    time_range: str = Query("6months"),
    category: Optional[str] = None,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Event, registration and revenue analytics for organizers and admins"""
    return analytics_service.events_analytics(
        db, actor=current_user, time_range=time_range, category=category
    )
