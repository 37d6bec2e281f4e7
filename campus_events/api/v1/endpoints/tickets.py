from typing import Any, List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from campus_events import schemas
from campus_events.api import deps
from campus_events.core.exceptions import ValidationError
from campus_events.db.database import get_db
from campus_events.models.user import User
from campus_events.services import tickets as ticket_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/claim", response_model=schemas.TicketClaimResponse, status_code=status.HTTP_201_CREATED)
def claim_ticket(
    *,
    db: Session = Depends(get_db),
    claim_in: schemas.TicketClaimRequest,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Claim a ticket for an event"""
    ticket, qr_image = ticket_service.issue_ticket(db, user=current_user, event_id=claim_in.event_id)
    data = schemas.Ticket.model_validate(ticket).model_dump()
    data["qr_code_image"] = qr_image
    return {"ticket": data}


@router.get("/my", response_model=List[schemas.TicketWithQR])
def read_my_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Tickets owned by the current student, newest first"""
    return ticket_service.list_my_tickets(db, user=current_user)


@router.post("/validate", response_model=schemas.TicketValidationResponse)
def validate_ticket(
    *,
    db: Session = Depends(get_db),
    validate_in: schemas.TicketValidateRequest,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Check a scanned QR payload without consuming the ticket"""
    if not validate_in.qr_data:
        raise ValidationError("QR data is required")
    return ticket_service.validate_ticket(db, qr_data=validate_in.qr_data, actor=current_user)


@router.post("/{ticket_id}/use", response_model=schemas.TicketActionResponse)
def use_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Mark a ticket as used at the door"""
    ticket = ticket_service.redeem_ticket(db, actor=current_user, ticket_id=ticket_id)
    return {"message": "Ticket marked as used successfully", "ticket": ticket}


@router.post("/{ticket_id}/return", response_model=schemas.TicketActionResponse)
def return_ticket(
    ticket_id: str,
    *,
    db: Session = Depends(get_db),
    return_in: schemas.TicketReturnRequest,
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    """Give an unused ticket back and free its seat"""
    ticket = ticket_service.return_ticket(
        db,
        user=current_user,
        ticket_id=ticket_id,
        reason=return_in.reason,
        comment=return_in.comment,
    )
    return {"message": "Ticket returned successfully", "ticket": ticket}


@router.get("/ticket-details/{ticket_id}", response_model=schemas.TicketWithQR)
def read_ticket_details(
    ticket_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user)
) -> Any:
    return ticket_service.ticket_details(db, actor=current_user, ticket_id=ticket_id)
