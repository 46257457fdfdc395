"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from eventphoto.db.enums import Role


class UserSession(BaseModel):
    """
    Full session context for authenticated requests.

    Returned by the get_current_session dependency; holds everything needed
    for tenant scoping and role checks.
    """

    user_id: UUID
    org_id: UUID
    role: Role
    email: str
    display_name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class MeResponse(BaseModel):
    """Response schema for GET /auth/me."""

    user_id: UUID
    email: str
    display_name: str | None
    role: Role
    org_id: UUID
    org_name: str


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class OrganizationRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    name: str
    subscription_status: str | None


class MemberAdd(BaseModel):
    email: EmailStr
