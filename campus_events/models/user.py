# File: campus_events/models/user.py
from sqlalchemy import Column, String, Boolean, Enum, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from campus_events.models.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class OrganizerStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.STUDENT,
        index=True,
    )
    organizer_status = Column(
        Enum(OrganizerStatus, name="organizer_status", values_callable=_enum_values),
        nullable=True,
    )
    organizer_notes = Column(Text, nullable=True)
    student_id = Column(String(50), nullable=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True)

    # Students and admins are approved on creation; organizers go through organizer_status
    is_approved = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    phone_number = Column(String(30), nullable=True)
    profile_picture = Column(String(500), nullable=True)

    # Relationships
    organization = relationship("Organization", back_populates="members")
    tickets = relationship(
        "Ticket",
        back_populates="user",
        foreign_keys="Ticket.user_id",
        cascade="all, delete-orphan",
    )
    saved_events = relationship("SavedEvent", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_approved_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER and self.organizer_status == OrganizerStatus.APPROVED

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else None})>"
