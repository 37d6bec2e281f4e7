from typing import Any, Dict, List, Optional
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from pydantic import BaseModel
from campus_events.crud.base import CRUDBase
from campus_events.models.event import Event
from campus_events.models.ticket import Ticket, TicketStatus, HELD_STATUSES


class CRUDTicket(CRUDBase[Ticket, BaseModel, BaseModel]):

    def get_by_ticket_id(self, db: Session, *, ticket_id: str) -> Optional[Ticket]:
        return db.query(Ticket).filter(Ticket.ticket_id == ticket_id).first()

    def get_by_qr_code(self, db: Session, *, qr_code: str) -> Optional[Ticket]:
        return db.query(Ticket).filter(Ticket.qr_code == qr_code).first()

    def get_held(self, db: Session, *, event_id: int, user_id: int) -> Optional[Ticket]:
        """The ticket currently holding a seat for this user at this event, if any."""
        return (
            db.query(Ticket)
            .filter(
                Ticket.event_id == event_id,
                Ticket.user_id == user_id,
                Ticket.status.in_(HELD_STATUSES),
            )
            .first()
        )

    def get_by_user(self, db: Session, *, user_id: int) -> List[Ticket]:
        return (
            db.query(Ticket)
            .filter(Ticket.user_id == user_id)
            .order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .all()
        )

    def get_by_event(
        self, db: Session, *, event_id: int, statuses: Optional[List[TicketStatus]] = None
    ) -> List[Ticket]:
        query = db.query(Ticket).filter(Ticket.event_id == event_id)
        if statuses:
            query = query.filter(Ticket.status.in_(statuses))
        return query.order_by(Ticket.created_at.asc(), Ticket.id.asc()).all()

    def get_by_events(self, db: Session, *, event_ids: List[int]) -> List[Ticket]:
        if not event_ids:
            return []
        return db.query(Ticket).filter(Ticket.event_id.in_(event_ids)).all()

    def transition(
        self, db: Session, *, ticket: Ticket, current: TicketStatus, values: Dict[str, Any]
    ) -> bool:
        """Apply values only if the row is still in ``current``. Does not commit."""
        updated = (
            db.query(Ticket)
            .filter(Ticket.id == ticket.id, Ticket.status == current)
            .update(values, synchronize_session=False)
        )
        return updated == 1

    def count_by_status(self, db: Session, *, event_ids: Optional[List[int]] = None) -> Dict[str, int]:
        counts = {s.value: 0 for s in TicketStatus}
        query = db.query(Ticket.status, func.count(Ticket.id))
        if event_ids is not None:
            if not event_ids:
                return counts
            query = query.filter(Ticket.event_id.in_(event_ids))
        for status, count in query.group_by(Ticket.status).all():
            counts[TicketStatus(status).value] = count
        return counts

    def release_seats_for_user(self, db: Session, *, user_id: int) -> int:
        """Hand back every seat a user holds, ahead of deleting the user. Does not commit."""
        held = (
            db.query(Ticket.event_id, func.count(Ticket.id))
            .filter(Ticket.user_id == user_id, Ticket.status.in_(HELD_STATUSES))
            .group_by(Ticket.event_id)
            .all()
        )
        for event_id, count in held:
            db.query(Event).filter(Event.id == event_id).update(
                {
                    Event.registrations: case(
                        (Event.registrations > count, Event.registrations - count),
                        else_=0,
                    )
                },
                synchronize_session=False,
            )
        return sum(count for _, count in held)


ticket = CRUDTicket(Ticket)
