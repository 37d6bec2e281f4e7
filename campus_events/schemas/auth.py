from pydantic import BaseModel, EmailStr
from typing import Optional
from campus_events.models.user import UserRole


class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: int
    role: UserRole


class TokenData(BaseModel):
    user_id: Optional[int] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
