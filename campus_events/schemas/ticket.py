from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from campus_events.models.ticket import TicketStatus, ReturnReason
from campus_events.schemas.event import EventSummary
from campus_events.schemas.user import UserSummary

# ==========================================
# REQUESTS
# ==========================================

class TicketClaimRequest(BaseModel):
    event_id: int


class TicketValidateRequest(BaseModel):
    qr_data: Optional[str] = None


class TicketReturnRequest(BaseModel):
    # Checked against ReturnReason by the returner so bad input is a 400, not a 422
    reason: Optional[str] = None
    comment: Optional[str] = None

# ==========================================
# RESPONSES
# ==========================================

class Ticket(BaseModel):
    ticket_id: str
    event_id: int
    user_id: int
    qr_code: str
    status: TicketStatus
    price: float
    used_at: Optional[datetime] = None
    used_by_id: Optional[int] = None
    return_reason: Optional[ReturnReason] = None
    return_comment: Optional[str] = None
    returned_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    event: Optional[EventSummary] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class TicketWithQR(Ticket):
    qr_code_image: str


class TicketClaimResponse(BaseModel):
    ticket: TicketWithQR


class TicketStatusSummary(BaseModel):
    ticket_id: str
    status: TicketStatus
    used_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketScanSummary(TicketStatusSummary):
    event: Optional[EventSummary] = None
    user: Optional[UserSummary] = None


class TicketValidationResponse(BaseModel):
    valid: bool
    ticket: TicketScanSummary


class TicketActionResponse(BaseModel):
    message: str
    ticket: TicketStatusSummary
