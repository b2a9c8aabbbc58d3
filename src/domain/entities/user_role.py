"""Global role and capability entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.company import CompanyRole


class GlobalRole(StrEnum):
    """Portal-wide role, independent of company membership."""

    ADMIN = "admin"
    USER = "user"


@dataclass
class UserRole:
    """Domain entity for a user's global role row."""

    user_id: UUID
    role: GlobalRole = GlobalRole.USER
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class Capabilities:
    """What the current user may do, resolved once per request.

    Handlers receive this object instead of re-querying roles themselves.
    """

    user_id: UUID
    email: str
    global_role: GlobalRole = GlobalRole.USER
    company_roles: dict[UUID, CompanyRole] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.global_role == GlobalRole.ADMIN

    @property
    def company_ids(self) -> list[UUID]:
        return list(self.company_roles)

    def role_in(self, company_id: UUID) -> CompanyRole | None:
        """The user's role in a company, or None if not a member."""
        return self.company_roles.get(company_id)
