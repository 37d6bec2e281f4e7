from sqlalchemy import Column, String, Text, Boolean, Integer
from sqlalchemy.orm import relationship
from campus_events.models.base import BaseModel


class Organization(BaseModel):
    __tablename__ = "organizations"

    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    contact_email = Column(String(255))
    website = Column(String(500))
    logo = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)

    # Metadata
    created_by_id = Column(Integer, nullable=True)

    # Relationships
    members = relationship("User", back_populates="organization")
    events = relationship("Event", back_populates="organization")

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def event_count(self) -> int:
        return len(self.events)
