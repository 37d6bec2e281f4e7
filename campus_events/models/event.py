# File: campus_events/models/event.py
from sqlalchemy import (
    Column, String, Text, Boolean, Float, ForeignKey, Integer, DateTime, Enum, JSON, CheckConstraint
)
from sqlalchemy.orm import relationship
from campus_events.models.base import BaseModel
import enum


class EventCategory(str, enum.Enum):
    ACADEMIC = "academic"
    SOCIAL = "social"
    SPORTS = "sports"
    CULTURAL = "cultural"
    CAREER = "career"
    VOLUNTEER = "volunteer"
    OTHER = "other"


class TicketType(str, enum.Enum):
    FREE = "free"
    PAID = "paid"


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Event(BaseModel):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("registrations >= 0", name="ck_events_registrations_non_negative"),
        CheckConstraint("capacity >= 1", name="ck_events_capacity_positive"),
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    start_time = Column(String(10), nullable=False)
    end_time = Column(String(10), nullable=False)
    location = Column(String(255), nullable=False)
    category = Column(
        Enum(EventCategory, name="event_category", values_callable=_enum_values),
        nullable=False,
        default=EventCategory.OTHER,
    )

    # Ticketing
    ticket_type = Column(
        Enum(TicketType, name="ticket_type", values_callable=_enum_values),
        nullable=False,
        default=TicketType.FREE,
    )
    ticket_price = Column(Float, default=0, nullable=False)
    capacity = Column(Integer, nullable=False)
    # Seats held by active and used tickets; only changed through conditional updates
    registrations = Column(Integer, default=0, server_default="0", nullable=False)

    # Moderation
    status = Column(
        Enum(EventStatus, name="event_status", values_callable=_enum_values),
        nullable=False,
        default=EventStatus.DRAFT,
        index=True,
    )
    is_approved = Column(Boolean, default=False, nullable=False)
    approval_reason = Column(Text)

    # Extra details
    tags = Column(JSON, default=list)
    requirements = Column(Text)
    contact_info = Column(String(255))
    image_url = Column(String(500))

    # Metadata
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    organization = relationship("Organization", back_populates="events")
    creator = relationship("User", foreign_keys=[created_by_id])
    tickets = relationship("Ticket", back_populates="event", cascade="all, delete-orphan")
    saved_by = relationship("SavedEvent", back_populates="event", cascade="all, delete-orphan")

    @property
    def is_free(self) -> bool:
        return self.ticket_type == TicketType.FREE
