"""
Authentication Schemas

Request/response models for tenant registration and login.
"""
from pydantic import EmailStr, Field
from typing import List, Optional

from bizsuite.models.tenant import BusinessType
from bizsuite.schemas.common import CamelModel
from bizsuite.schemas.tenant import TenantDetail, TenantSummary
from bizsuite.schemas.user import UserResponse


class LoginRequest(CamelModel):
    """Login request body. Emails are unique platform-wide."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    """Creates a tenant and its owner in one step."""
    tenant_name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=2, max_length=100, pattern="^[a-z0-9]+(?:-[a-z0-9]+)*$")
    business_type: BusinessType
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    class Config:
        json_schema_extra = {
            "example": {
                "tenantName": "Acme Corp",
                "slug": "acme",
                "businessType": "inventory",
                "email": "owner@acme.example.com",
                "password": "securepassword123",
                "firstName": "Jane",
                "lastName": "Doe"
            }
        }


class AuthPayload(CamelModel):
    """Returned by register and login."""
    token: str
    token_type: str = "bearer"
    user: UserResponse
    tenant: TenantSummary


class MePayload(CamelModel):
    user: UserResponse
    tenant: TenantDetail
    modules: List[str]
