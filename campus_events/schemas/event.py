# File: campus_events/schemas/event.py
from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import datetime
from campus_events.models.event import EventCategory, EventStatus, TicketType
from campus_events.schemas.common import Pagination
from campus_events.schemas.organization import OrganizationSummary

# Organizers may only move their own events between these; completed is admin territory
ORGANIZER_EDITABLE_STATUSES = (EventStatus.DRAFT, EventStatus.PUBLISHED, EventStatus.CANCELLED)


def _not_blank(v):
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError('Field cannot be empty')
    return v


class EventBase(BaseModel):
    title: str
    description: str
    date: datetime
    start_time: str
    end_time: str
    location: str
    category: EventCategory
    ticket_type: TicketType = TicketType.FREE
    ticket_price: float = 0
    capacity: int
    tags: List[str] = []
    requirements: Optional[str] = None
    contact_info: Optional[str] = None
    image_url: Optional[str] = None


class EventCreate(EventBase):

    @validator('title', 'description', 'location', 'start_time', 'end_time')
    def validate_not_blank(cls, v):
        return _not_blank(v)

    @validator('capacity')
    def validate_capacity(cls, v):
        if v < 1:
            raise ValueError('Capacity must be at least 1')
        return v

    @validator('ticket_price')
    def validate_price(cls, v):
        if v < 0:
            raise ValueError('Ticket price cannot be negative')
        return v


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    category: Optional[EventCategory] = None
    ticket_type: Optional[TicketType] = None
    ticket_price: Optional[float] = None
    capacity: Optional[int] = None
    tags: Optional[List[str]] = None
    requirements: Optional[str] = None
    contact_info: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[EventStatus] = None

    @validator('title', 'description', 'location', 'start_time', 'end_time')
    def validate_not_blank(cls, v):
        return _not_blank(v)

    @validator('capacity')
    def validate_capacity(cls, v):
        if v is not None and v < 1:
            raise ValueError('Capacity must be at least 1')
        return v

    @validator('ticket_price')
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError('Ticket price cannot be negative')
        return v

    @validator('status')
    def validate_status(cls, v):
        if v is not None and v not in ORGANIZER_EDITABLE_STATUSES:
            raise ValueError('Status must be one of draft, published, cancelled')
        return v


class EventSummary(BaseModel):
    id: int
    title: str
    date: datetime
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    organization_id: Optional[int] = None
    organization: Optional[OrganizationSummary] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class Event(EventBase):
    id: int
    status: EventStatus
    is_approved: bool
    approval_reason: Optional[str] = None
    registrations: int
    organization_id: Optional[int] = None
    organization: Optional[OrganizationSummary] = None
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventWithTickets(Event):
    tickets_issued: int = 0
    tickets_used: int = 0
    remaining_capacity: int = 0


class EventListResponse(BaseModel):
    events: List[EventWithTickets]
    pagination: Pagination

# ==========================================
# ADMIN MODERATION
# ==========================================

class EventApproval(BaseModel):
    is_approved: bool
    reason: Optional[str] = None


class EventStatusChange(BaseModel):
    status: EventStatus

# ==========================================
# ATTENDEES
# ==========================================

class AttendeeUser(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    student_id: Optional[str] = None
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True


class Attendee(BaseModel):
    ticket_id: str
    user: AttendeeUser
    status: str
    created_at: datetime
    used_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendeesResponse(BaseModel):
    event: EventSummary
    attendees: List[Attendee]
    total_attendees: int
