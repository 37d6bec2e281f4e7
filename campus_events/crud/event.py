from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session
from campus_events.crud.base import CRUDBase
from campus_events.models.base import utcnow
from campus_events.models.event import Event, EventCategory, EventStatus
from campus_events.models.ticket import Ticket, TicketStatus
from campus_events.schemas.event import EventCreate, EventUpdate


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):

    def create_with_organization(
        self, db: Session, *, obj_in: EventCreate, organization_id: int, created_by_id: int
    ) -> Event:
        event_data = obj_in.dict()
        event_data["date"] = _to_utc(event_data["date"])
        event_data["organization_id"] = organization_id
        event_data["created_by_id"] = created_by_id
        event_data["status"] = EventStatus.DRAFT
        event_data["is_approved"] = False

        db_obj = Event(**event_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: Event, obj_in: Union[EventUpdate, Dict[str, Any]]
    ) -> Event:
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.dict(exclude_unset=True)
        if update_data.get("date") is not None:
            update_data["date"] = _to_utc(update_data["date"])
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def get_public(
        self,
        db: Session,
        *,
        category: Optional[EventCategory] = None,
        day: Optional[datetime] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Event], int]:
        """Published, approved and upcoming events, soonest first."""
        query = db.query(Event).filter(
            Event.status == EventStatus.PUBLISHED,
            Event.is_approved.is_(True),
            Event.date >= utcnow(),
        )
        if category is not None:
            query = query.filter(Event.category == category)
        if day is not None:
            start = _to_utc(datetime(day.year, day.month, day.day))
            query = query.filter(Event.date >= start, Event.date < start + timedelta(days=1))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Event.title.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.location.ilike(pattern),
                )
            )
        total = query.count()
        events = query.order_by(Event.date.asc(), Event.id.asc()).offset(skip).limit(limit).all()
        return events, total

    def get_by_organization(
        self, db: Session, *, organization_id: int, status: Optional[EventStatus] = None
    ) -> List[Event]:
        query = db.query(Event).filter(Event.organization_id == organization_id)
        if status is not None:
            query = query.filter(Event.status == status)
        return query.order_by(Event.date.desc(), Event.id.desc()).all()

    def get_by_creator(self, db: Session, *, created_by_id: int) -> List[Event]:
        return (
            db.query(Event)
            .filter(Event.created_by_id == created_by_id)
            .order_by(Event.date.desc(), Event.id.desc())
            .all()
        )

    def get_for_moderation(
        self,
        db: Session,
        *,
        status: Optional[EventStatus] = None,
        is_approved: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Event], int]:
        query = db.query(Event)
        if status is not None:
            query = query.filter(Event.status == status)
        if is_approved is not None:
            query = query.filter(Event.is_approved.is_(is_approved))
        total = query.count()
        events = query.order_by(Event.created_at.desc(), Event.id.desc()).offset(skip).limit(limit).all()
        return events, total

    def reserve_seat(self, db: Session, *, event_id: int) -> bool:
        """Take one seat if any is left. Does not commit."""
        updated = (
            db.query(Event)
            .filter(Event.id == event_id, Event.registrations < Event.capacity)
            .update({Event.registrations: Event.registrations + 1}, synchronize_session=False)
        )
        return updated == 1

    def release_seat(self, db: Session, *, event_id: int) -> None:
        """Give one seat back, never going below zero. Does not commit."""
        db.query(Event).filter(Event.id == event_id).update(
            {
                Event.registrations: case(
                    (Event.registrations > 0, Event.registrations - 1),
                    else_=0,
                )
            },
            synchronize_session=False,
        )

    def ticket_counts(self, db: Session, *, event_ids: Iterable[int]) -> Dict[int, Dict[str, int]]:
        """Per-event ticket counts keyed by status value."""
        event_ids = list(event_ids)
        counts: Dict[int, Dict[str, int]] = {
            event_id: {s.value: 0 for s in TicketStatus} for event_id in event_ids
        }
        if not event_ids:
            return counts
        rows = (
            db.query(Ticket.event_id, Ticket.status, func.count(Ticket.id))
            .filter(Ticket.event_id.in_(event_ids))
            .group_by(Ticket.event_id, Ticket.status)
            .all()
        )
        for event_id, status, count in rows:
            counts[event_id][TicketStatus(status).value] = count
        return counts

    def count_by_status(self, db: Session) -> Dict[str, int]:
        counts = {s.value: 0 for s in EventStatus}
        for status, count in db.query(Event.status, func.count(Event.id)).group_by(Event.status).all():
            counts[EventStatus(status).value] = count
        return counts


event = CRUDEvent(Event)
