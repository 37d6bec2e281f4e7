# File: campus_events/schemas/user.py
from pydantic import BaseModel, EmailStr, validator
from typing import List, Optional
from datetime import datetime
from campus_events.models.user import UserRole, OrganizerStatus
from campus_events.schemas.common import Pagination
from campus_events.schemas.organization import OrganizationSummary

# ==========================================
# BASE SCHEMAS
# ==========================================

class UserBase(BaseModel):
    """Base user schema with common fields"""
    email: EmailStr
    first_name: str
    last_name: str
    phone_number: Optional[str] = None


class UserCreate(UserBase):
    """Self registration; admins are never created through the API"""
    password: str
    role: UserRole = UserRole.STUDENT
    student_id: Optional[str] = None
    organization_id: Optional[int] = None

    @validator('password')
    def validate_password_length(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters long')
        return v

    @validator('role')
    def validate_self_service_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError('Admin accounts cannot be self-registered')
        return v

    @validator('first_name', 'last_name')
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be empty')
        return v

# ==========================================
# PROFILE UPDATE SCHEMAS
# ==========================================

class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None

    @validator('first_name', 'last_name')
    def strip_names(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be empty')
        return v

# ==========================================
# RESPONSE SCHEMAS
# ==========================================

class UserSummary(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class User(UserSummary):
    role: UserRole
    organizer_status: Optional[OrganizerStatus] = None
    organizer_notes: Optional[str] = None
    student_id: Optional[str] = None
    organization_id: Optional[int] = None
    organization: Optional[OrganizationSummary] = None
    is_approved: bool
    is_active: bool
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ==========================================
# ADMIN SCHEMAS
# ==========================================

class UserApprovalUpdate(BaseModel):
    is_approved: bool
    organizer_notes: Optional[str] = None


class UserRoleChange(BaseModel):
    role: UserRole
    organizer_status: Optional[OrganizerStatus] = None
    organization_id: Optional[int] = None


class UserListResponse(BaseModel):
    users: List[User]
    pagination: Pagination
