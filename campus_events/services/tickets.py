"""
Ticket lifecycle: issue, validate, redeem and return.

Every status change is checked against ``TRANSITIONS`` first and then applied
with an UPDATE conditioned on the status the ticket was read in. Seat counts
move in the same transaction as the ticket row, so a failed step rolls both
back together.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_events import crud
from campus_events.core.exceptions import Conflict, InvalidState, NotFound, ValidationError
from campus_events.core.permissions import Operation, require
from campus_events.models.base import as_utc, utcnow
from campus_events.models.event import EventStatus, TicketType
from campus_events.models.ticket import Ticket, TicketStatus, ReturnReason
from campus_events.models.user import User
from campus_events.schemas.ticket import Ticket as TicketSchema
from campus_events.services.qr_code import build_payload, parse_payload, render_qr_data_url

logger = logging.getLogger(__name__)

# None is the "no ticket yet" state the issuer starts from
TRANSITIONS = {
    None: {TicketStatus.ACTIVE},
    TicketStatus.ACTIVE: {TicketStatus.USED, TicketStatus.CANCELLED, TicketStatus.EXPIRED},
}

TERMINAL_STATUSES = {TicketStatus.USED, TicketStatus.CANCELLED, TicketStatus.EXPIRED}


def attempt_transition(
    ticket: Optional[Ticket], target: TicketStatus, message: Optional[str] = None
) -> TicketStatus:
    """Return ``target`` if the ticket may move there, otherwise raise.

    A ticket sitting in a terminal status raises Conflict with its current
    status and used_at. Anything else missing from the table is InvalidState.
    """
    current = ticket.status if ticket is not None else None
    if target in TRANSITIONS.get(current, set()):
        return target

    if current in TERMINAL_STATUSES:
        logger.warning(
            f"Transition denied for ticket {ticket.ticket_id}: {current.value} -> {target.value}"
        )
        raise Conflict(
            message or f"Ticket is already {current.value}",
            {"status": current.value, "used_at": ticket.used_at},
        )

    raise InvalidState(
        f"Cannot move ticket from {current.value if current else 'none'} to {target.value}"
    )


def _load_ticket(db: Session, ticket_id: str) -> Ticket:
    ticket = crud.ticket.get_by_ticket_id(db, ticket_id=ticket_id)
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


def _with_qr(ticket: Ticket) -> Dict[str, Any]:
    data = TicketSchema.model_validate(ticket).model_dump()
    data["qr_code_image"] = render_qr_data_url(ticket.qr_code)
    return data


def issue_ticket(db: Session, *, user: User, event_id: int) -> Tuple[Ticket, str]:
    """Claim one seat at ``event_id`` for ``user``; returns the ticket and its QR image."""
    require(user, Operation.CLAIM_TICKET, message="Only students can claim tickets")

    event = crud.event.get(db, id=event_id)
    if not event:
        raise NotFound("Event not found")

    if event.status != EventStatus.PUBLISHED or not event.is_approved:
        raise InvalidState("Event is not available for claiming")

    if as_utc(event.date) < utcnow():
        raise InvalidState("Event already passed")

    if crud.ticket.get_held(db, event_id=event.id, user_id=user.id):
        raise Conflict("You already have a ticket for this event")

    attempt_transition(None, TicketStatus.ACTIVE)

    if not crud.event.reserve_seat(db, event_id=event.id):
        db.rollback()
        logger.info(f"Claim rejected, event {event.id} sold out (user {user.id})")
        raise Conflict("Event is sold out")

    ticket_id = str(uuid.uuid4())
    ticket = Ticket(
        ticket_id=ticket_id,
        event_id=event.id,
        user_id=user.id,
        qr_code=build_payload(ticket_id, event.id, user.id),
        status=TicketStatus.ACTIVE,
        price=0 if event.ticket_type == TicketType.FREE else event.ticket_price,
    )
    db.add(ticket)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent claim by the same user
        db.rollback()
        logger.warning(f"Duplicate claim for event {event.id} by user {user.id}")
        raise Conflict("You already have a ticket for this event")

    db.refresh(ticket)
    logger.info(f"Ticket {ticket.ticket_id} issued for event {event.id} to user {user.id}")
    return ticket, render_qr_data_url(ticket.qr_code)


def validate_ticket(db: Session, *, qr_data: Any, actor: Optional[User] = None) -> Dict[str, Any]:
    """Resolve a scanned payload to its ticket without changing anything.

    With ``actor`` set the ticket must belong to one of the actor's events;
    ``actor=None`` is the unscoped lookup used internally.
    """
    if actor is not None:
        require(actor, Operation.VALIDATE_TICKET)

    parse_payload(qr_data)

    ticket = crud.ticket.get_by_qr_code(db, qr_code=qr_data)
    if not ticket:
        raise NotFound("Ticket not found")

    if actor is not None:
        require(
            actor,
            Operation.VALIDATE_TICKET,
            ticket,
            message="Ticket does not belong to your organization",
        )

    return {"valid": ticket.status == TicketStatus.ACTIVE, "ticket": ticket}


def redeem_ticket(db: Session, *, actor: User, ticket_id: str) -> Ticket:
    require(actor, Operation.REDEEM_TICKET, message="Only organizers can use tickets")

    ticket = _load_ticket(db, ticket_id)
    require(
        actor,
        Operation.REDEEM_TICKET,
        ticket,
        message="Ticket does not belong to your organization",
    )

    target = attempt_transition(ticket, TicketStatus.USED, message="Ticket cannot be used")
    applied = crud.ticket.transition(
        db,
        ticket=ticket,
        current=TicketStatus.ACTIVE,
        values={"status": target, "used_at": utcnow(), "used_by_id": actor.id, "updated_at": utcnow()},
    )
    if not applied:
        db.rollback()
        db.refresh(ticket)
        logger.warning(f"Concurrent redeem lost for ticket {ticket.ticket_id}")
        raise Conflict(
            "Ticket cannot be used",
            {"status": ticket.status.value, "used_at": ticket.used_at},
        )

    db.commit()
    db.refresh(ticket)
    logger.info(f"Ticket {ticket.ticket_id} used at event {ticket.event_id} by organizer {actor.id}")
    return ticket


def _parse_reason(reason: Any) -> ReturnReason:
    if not reason:
        raise ValidationError("Return reason is required")
    try:
        return ReturnReason(reason)
    except ValueError:
        raise ValidationError(
            "Invalid return reason",
            {"allowed": [r.value for r in ReturnReason]},
        )


def return_ticket(
    db: Session, *, user: User, ticket_id: str, reason: Any, comment: Optional[str] = None
) -> Ticket:
    require(user, Operation.RETURN_TICKET, message="Only students can return tickets")
    return_reason = _parse_reason(reason)

    ticket = _load_ticket(db, ticket_id)
    require(user, Operation.RETURN_TICKET, ticket, message="Access denied")

    target = attempt_transition(ticket, TicketStatus.CANCELLED, message="Ticket is not active")
    now = utcnow()
    applied = crud.ticket.transition(
        db,
        ticket=ticket,
        current=TicketStatus.ACTIVE,
        values={
            "status": target,
            "return_reason": return_reason,
            "return_comment": comment,
            "returned_at": now,
            "updated_at": now,
        },
    )
    if not applied:
        db.rollback()
        db.refresh(ticket)
        raise Conflict("Ticket is not active", {"status": ticket.status.value, "used_at": ticket.used_at})

    crud.event.release_seat(db, event_id=ticket.event_id)
    db.commit()
    db.refresh(ticket)
    logger.info(
        f"Ticket {ticket.ticket_id} returned by user {user.id} ({return_reason.value})"
    )
    return ticket


def ticket_details(db: Session, *, actor: User, ticket_id: str) -> Dict[str, Any]:
    ticket = _load_ticket(db, ticket_id)
    require(actor, Operation.VIEW_TICKET, ticket, message="Access denied")
    return _with_qr(ticket)


def list_my_tickets(db: Session, *, user: User) -> List[Dict[str, Any]]:
    require(user, Operation.LIST_MY_TICKETS, message="Only students can view their tickets")
    return [_with_qr(ticket) for ticket in crud.ticket.get_by_user(db, user_id=user.id)]
