from .base import BaseModel
from .organization import Organization
from .user import User, UserRole, OrganizerStatus
from .event import Event, EventCategory, EventStatus, TicketType
from .ticket import Ticket, TicketStatus, ReturnReason, HELD_STATUSES
from .saved_event import SavedEvent

__all__ = [
    "BaseModel", "Organization", "User", "UserRole", "OrganizerStatus",
    "Event", "EventCategory", "EventStatus", "TicketType",
    "Ticket", "TicketStatus", "ReturnReason", "HELD_STATUSES", "SavedEvent",
]
