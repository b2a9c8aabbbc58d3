"""Company (tenant) domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class CompanyRole(StrEnum):
    """Role of a user inside one company."""

    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


COMPANY_ROLES = [role.value for role in CompanyRole]


@dataclass
class Company:
    """Domain entity for a client company."""

    company: str
    owner_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    description: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class CompanyMember:
    """Domain entity for a user's membership in a company."""

    company_id: UUID
    user_id: UUID
    role: CompanyRole = CompanyRole.MEMBER
    created_at: datetime = field(default_factory=datetime.utcnow)
