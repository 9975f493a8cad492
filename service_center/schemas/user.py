"""
Pydantic schemas for User and Authentication.
"""
from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from service_center.models.user import UserRole


class User(BaseModel):
    """Schema for user responses."""
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    role: UserRole
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """Schema for login request."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for authentication token."""
    access_token: str
    token_type: str = "bearer"
    user: Optional[User] = None
