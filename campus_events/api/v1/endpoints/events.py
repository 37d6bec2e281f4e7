from datetime import date as date_type, datetime
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from campus_events import crud, schemas
from campus_events.api import deps
from campus_events.core.config import settings
from campus_events.core.exceptions import Conflict, NotFound, ValidationError
from campus_events.core.permissions import Operation, require
from campus_events.db.database import get_db
from campus_events.models.event import Event, EventCategory, EventStatus
from campus_events.models.ticket import TicketStatus
from campus_events.models.user import User
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def with_ticket_counts(db: Session, events: List[Event]) -> List[Dict[str, Any]]:
    counts = crud.event.ticket_counts(db, event_ids=[e.id for e in events])
    results = []
    for event in events:
        c = counts.get(event.id, {})
        used = c.get(TicketStatus.USED.value, 0)
        held = c.get(TicketStatus.ACTIVE.value, 0) + used
        data = schemas.Event.model_validate(event).model_dump()
        data["tickets_issued"] = held
        data["tickets_used"] = used
        data["remaining_capacity"] = max(event.capacity - held, 0)
        results.append(data)
    return results


def _get_event_or_404(db: Session, event_id: int) -> Event:
    event = crud.event.get(db, id=event_id)
    if not event:
        raise NotFound("Event not found")
    return event


@router.get("", response_model=schemas.EventListResponse)
def read_events(
    db: Session = Depends(get_db),
    category: Optional[EventCategory] = None,
    date: Optional[date_type] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
) -> Any:
    """Upcoming published events, soonest first"""
    skip = (page - 1) * limit
    day = datetime(date.year, date.month, date.day) if date else None
    events, total = crud.event.get_public(
        db, category=category, day=day, search=search, skip=skip, limit=limit
    )
    return {
        "events": with_ticket_counts(db, events),
        "pagination": schemas.build_pagination(page, limit, total, len(events)),
    }


@router.get("/organizer", response_model=List[schemas.EventWithTickets])
def read_organization_events(
    db: Session = Depends(get_db),
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Every event of the organizer's organization with seat counts"""
    require(current_user, Operation.CREATE_EVENT, message="Only organizers can view organization events")
    events = crud.event.get_by_organization(
        db, organization_id=current_user.organization_id, status=event_status
    )
    return with_ticket_counts(db, events)


@router.get("/saved/my", response_model=List[schemas.Event])
def read_saved_events(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    require(current_user, Operation.SAVE_EVENT, message="Only students can save events")
    return [entry.event for entry in crud.saved_event.get_by_user(db, user_id=current_user.id) if entry.event]


@router.get("/attendees/{event_id}", response_model=schemas.AttendeesResponse)
def read_event_attendees(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    event = _get_event_or_404(db, event_id)
    require(current_user, Operation.MANAGE_EVENT, event, message="Access denied")

    tickets = sorted(
        crud.ticket.get_by_event(db, event_id=event.id),
        key=lambda t: (t.created_at, t.id),
        reverse=True,
    )
    return {
        "event": event,
        "attendees": [
            {
                "ticket_id": t.ticket_id,
                "user": t.user,
                "status": t.status.value,
                "created_at": t.created_at,
                "used_at": t.used_at,
            }
            for t in tickets
        ],
        "total_attendees": len(tickets),
    }


@router.get("/{event_id}", response_model=schemas.EventWithTickets)
def read_event(
    event_id: int,
    db: Session = Depends(get_db)
) -> Any:
    event = _get_event_or_404(db, event_id)
    return with_ticket_counts(db, [event])[0]


@router.post("", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event(
    *,
    db: Session = Depends(get_db),
    event_in: schemas.EventCreate,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Create a draft event in the organizer's organization"""
    require(current_user, Operation.CREATE_EVENT, message="Only approved organizers can create events")
    event = crud.event.create_with_organization(
        db,
        obj_in=event_in,
        organization_id=current_user.organization_id,
        created_by_id=current_user.id,
    )
    logger.info(f"Event {event.id} created by organizer {current_user.id}")
    return event


@router.put("/{event_id}", response_model=schemas.Event)
def update_event(
    event_id: int,
    *,
    db: Session = Depends(get_db),
    event_in: schemas.EventUpdate,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    event = _get_event_or_404(db, event_id)
    require(current_user, Operation.MANAGE_EVENT, event, message="Access denied")

    if event_in.capacity is not None and event_in.capacity < event.registrations:
        raise ValidationError(
            "Capacity cannot be lower than the number of tickets already issued",
            {"registrations": event.registrations},
        )

    event = crud.event.update(db, db_obj=event, obj_in=event_in)
    logger.info(f"Event {event.id} updated by user {current_user.id}")
    return event


@router.delete("/{event_id}", response_model=schemas.Message)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    event = _get_event_or_404(db, event_id)
    require(current_user, Operation.MANAGE_EVENT, event, message="Access denied")
    crud.event.remove(db, id=event.id)
    logger.info(f"Event {event_id} deleted by user {current_user.id}")
    return {"message": "Event deleted successfully"}


@router.post("/{event_id}/save", response_model=schemas.Message, status_code=status.HTTP_201_CREATED)
def save_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    require(current_user, Operation.SAVE_EVENT, message="Only students can save events")
    event = _get_event_or_404(db, event_id)

    if crud.saved_event.get_entry(db, user_id=current_user.id, event_id=event.id):
        raise Conflict("Event already saved")
    try:
        crud.saved_event.save(db, user_id=current_user.id, event_id=event.id)
    except IntegrityError:
        db.rollback()
        raise Conflict("Event already saved")
    return {"message": "Event saved successfully"}


@router.delete("/{event_id}/save", response_model=schemas.Message)
def unsave_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    require(current_user, Operation.SAVE_EVENT, message="Only students can save events")
    entry = crud.saved_event.get_entry(db, user_id=current_user.id, event_id=event_id)
    if not entry:
        raise NotFound("Saved event not found")
    crud.saved_event.remove(db, id=entry.id)
    return {"message": "Event removed from saved events"}
