from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from campus_events.models.base import BaseModel, utcnow


class SavedEvent(BaseModel):
    __tablename__ = "saved_events"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_saved_events_user_event"),
    )

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    saved_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="saved_events")
    event = relationship("Event", back_populates="saved_by")
