from .user import user
from .organization import organization
from .event import event
from .ticket import ticket
from .saved_event import saved_event

__all__ = ["user", "organization", "event", "ticket", "saved_event"]
