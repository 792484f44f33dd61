"""
User Schemas

Request/response models for user operations.
"""
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from bizsuite.models.user import UserRole
from bizsuite.schemas.common import CamelModel


class UserBase(CamelModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UserCreate(UserBase):
    """Schema for creating a new user. The owner is only created at registration."""
    password: str = Field(..., min_length=8, max_length=100)
    role: UserRole = UserRole.STAFF


class UserUpdate(CamelModel):
    """Schema for updating a user. All fields optional."""
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=100)


class UserResponse(CamelModel):
    """User response schema (excludes sensitive data)."""
    id: str
    tenant_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None
