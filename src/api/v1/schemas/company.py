"""Pydantic schemas for Company API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.company import Company, CompanyMember


class CreateCompanyRequest(BaseModel):
    """Schema for creating a company."""

    company: str = Field(..., min_length=1, max_length=255)
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=5000)


class UpdateCompanyRequest(BaseModel):
    """Schema for updating a company (all fields optional)."""

    company: str | None = Field(None, min_length=1, max_length=255)
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=5000)


class CompanyResponse(BaseModel):
    """Schema for Company response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "456e4567-e89b-12d3-a456-426614174000",
                "company": "Acme Inc",
                "name": "Jane Doe",
                "phone": "+1 555 0100",
                "email": "jane@acme.example",
                "description": None,
                "owner_id": "789e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    company: str
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    description: str | None = None
    owner_id: UUID | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, company: Company) -> "CompanyResponse":
        return cls(
            id=company.id,
            company=company.company,
            name=company.name,
            phone=company.phone,
            email=company.email,
            description=company.description,
            owner_id=company.owner_id,
            created_at=company.created_at,
        )


class CompanyListResponse(BaseModel):
    """Schema for list of Companies response."""

    data: list[CompanyResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class CompanyMemberResponse(BaseModel):
    """Schema for one membership of a company."""

    user_id: UUID
    role: str
    created_at: datetime

    @classmethod
    def from_entity(cls, member: CompanyMember) -> "CompanyMemberResponse":
        return cls(user_id=member.user_id, role=member.role.value, created_at=member.created_at)


class CompanyDetailResponse(BaseModel):
    """Schema for a company together with its members."""

    data: CompanyResponse
    members: list[CompanyMemberResponse] = Field(default_factory=list)
