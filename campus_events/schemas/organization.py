from pydantic import BaseModel, EmailStr, validator
from typing import Optional
from datetime import datetime


class OrganizationSummary(BaseModel):
    id: int
    name: str
    logo: Optional[str] = None

    class Config:
        from_attributes = True


class OrganizationBase(BaseModel):
    name: str
    description: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    website: Optional[str] = None
    logo: Optional[str] = None

    @validator('name')
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Organization name cannot be empty')
        return v


class OrganizationCreate(OrganizationBase):
    pass


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class Organization(OrganizationBase):
    id: int
    contact_email: Optional[str] = None
    is_active: bool
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    member_count: int = 0
    event_count: int = 0

    class Config:
        from_attributes = True
