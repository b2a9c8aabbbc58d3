"""Pydantic schemas for the administration API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.services.user_service import UserSummary


class InviteUserRequest(BaseModel):
    """Schema for inviting a user into a company.

    Without ``client_id`` a new company named ``company`` is created.
    """

    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field("", max_length=255)
    client_id: UUID | None = None
    company: str | None = Field(None, max_length=255)
    role: str = Field("member", pattern="^(admin|member|viewer)$")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        v = v.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Invalid email address")
        return v


class InviteUserResponse(BaseModel):
    """Schema for the invitation response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Invitation email sent to: user@example.com",
                "client_id": "456e4567-e89b-12d3-a456-426614174000",
                "redirect_url": "https://portal.example.com/auth/callback"
                "?client_id=456e4567-e89b-12d3-a456-426614174000",
            }
        },
    )

    success: bool = True
    message: str
    client_id: UUID
    redirect_url: str


class AddCompanyMemberRequest(BaseModel):
    """Schema for adding a user to a company or changing their role."""

    user_id: UUID
    client_id: UUID
    role: str = "member"


class AddCompanyMemberResponse(BaseModel):
    """Schema for the add-to-company response."""

    success: bool = True
    message: str
    client_id: UUID
    user_id: UUID
    role: str


class SetUserRoleRequest(BaseModel):
    """Schema for changing a user's global role."""

    role: str = Field(..., pattern="^(admin|user)$")


class UserRoleResponse(BaseModel):
    """Schema for a user's global role."""

    user_id: UUID
    role: str


class UserCompanyResponse(BaseModel):
    """Schema for one company a user belongs to."""

    id: UUID
    company: str
    role: str


class AdminUserResponse(BaseModel):
    """Schema for a user as seen by administrators."""

    id: UUID
    email: str
    display_name: str | None = None
    role: str
    email_confirmed: bool = False
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    companies: list[UserCompanyResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: UserSummary) -> "AdminUserResponse":
        identity = summary.identity
        return cls(
            id=identity.id,
            email=identity.email,
            display_name=identity.display_name,
            role=summary.role.value,
            email_confirmed=identity.email_confirmed_at is not None,
            created_at=identity.created_at,
            last_sign_in_at=identity.last_sign_in_at,
            companies=[
                UserCompanyResponse(id=company.id, company=company.company, role=role.value)
                for company, role in summary.companies
            ],
        )


class AdminUserListResponse(BaseModel):
    """Schema for list of users response."""

    data: list[AdminUserResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class PendingInvitationResponse(BaseModel):
    """Schema for a pending (or claimed) invitation."""

    id: UUID
    email: str
    client_id: UUID
    role: str
    name: str = ""
    created_at: datetime
    claimed_at: datetime | None = None
    claimed_by: UUID | None = None


class PendingInvitationListResponse(BaseModel):
    """Schema for list of invitations response."""

    data: list[PendingInvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
