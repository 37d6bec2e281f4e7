# File: campus_events/models/ticket.py
from sqlalchemy import Column, String, Text, Float, ForeignKey, Integer, DateTime, Enum, Index, text
from sqlalchemy.orm import relationship
from campus_events.models.base import BaseModel
import enum


class TicketStatus(str, enum.Enum):
    ACTIVE = "active"
    USED = "used"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ReturnReason(str, enum.Enum):
    UNABLE_TO_ATTEND = "unable_to_attend"
    NO_LONGER_INTERESTED = "no_longer_interested"
    WRONG_EVENT = "wrong_event"
    DUPLICATE_TICKET = "duplicate_ticket"
    EVENT_CANCELED = "event_canceled"
    SCHEDULE_CONFLICT = "schedule_conflict"
    PERSONAL_REASONS = "personal_reasons"
    OTHER = "other"


# Statuses that hold a seat; at most one such ticket per (event, user)
HELD_STATUSES = (TicketStatus.ACTIVE, TicketStatus.USED)
_HELD_CLAUSE = "status IN ('active', 'used')"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Ticket(BaseModel):
    __tablename__ = "tickets"
    __table_args__ = (
        Index("ix_tickets_event_user", "event_id", "user_id"),
        Index(
            "uq_tickets_event_user_held",
            "event_id",
            "user_id",
            unique=True,
            postgresql_where=text(_HELD_CLAUSE),
            sqlite_where=text(_HELD_CLAUSE),
        ),
    )

    ticket_id = Column(String(36), unique=True, index=True, nullable=False)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    qr_code = Column(String(512), unique=True, nullable=False)
    status = Column(
        Enum(TicketStatus, name="ticket_status", values_callable=_enum_values),
        nullable=False,
        default=TicketStatus.ACTIVE,
        index=True,
    )
    price = Column(Float, default=0, nullable=False)

    # Redemption
    used_at = Column(DateTime(timezone=True), nullable=True)
    used_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Return
    return_reason = Column(
        Enum(ReturnReason, name="return_reason", values_callable=_enum_values),
        nullable=True,
    )
    return_comment = Column(Text, nullable=True)
    returned_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    event = relationship("Event", back_populates="tickets")
    user = relationship("User", back_populates="tickets", foreign_keys=[user_id])
    used_by = relationship("User", foreign_keys=[used_by_id])

    def __repr__(self):
        return f"<Ticket {self.ticket_id} ({self.status.value if self.status else None})>"
