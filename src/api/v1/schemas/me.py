"""Pydantic schemas for the current user API."""

from uuid import UUID

from pydantic import BaseModel, Field

from domain.entities.user_role import Capabilities


class CompanyRoleResponse(BaseModel):
    """Schema for the user's role in one company."""

    client_id: UUID
    role: str


class CapabilitiesResponse(BaseModel):
    """Schema for what the current user may do."""

    user_id: UUID
    email: str
    role: str
    is_admin: bool
    companies: list[CompanyRoleResponse] = Field(default_factory=list)

    @classmethod
    def from_capabilities(cls, capabilities: Capabilities) -> "CapabilitiesResponse":
        return cls(
            user_id=capabilities.user_id,
            email=capabilities.email,
            role=capabilities.global_role.value,
            is_admin=capabilities.is_admin,
            companies=[
                CompanyRoleResponse(client_id=company_id, role=role.value)
                for company_id, role in capabilities.company_roles.items()
            ],
        )
