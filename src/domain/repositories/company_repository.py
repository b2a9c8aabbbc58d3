"""Company repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.company import Company, CompanyMember, CompanyRole


class ICompanyRepository(Protocol):
    """Repository interface for Company entities and memberships."""

    async def get(self, id: UUID) -> Company | None:
        """Get a company by ID."""
        ...

    async def list_all(self) -> list[Company]:
        """Get all companies ordered by name."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[Company]:
        """Get all companies a user is a member of."""
        ...

    async def create(self, company: Company) -> Company:
        """Create a new company."""
        ...

    async def update(self, company: Company) -> Company:
        """Update an existing company."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a company and return success status."""
        ...

    async def get_member(self, company_id: UUID, user_id: UUID) -> CompanyMember | None:
        """Get a membership by company and user IDs."""
        ...

    async def get_members(self, company_id: UUID) -> list[CompanyMember]:
        """Get all memberships of a company."""
        ...

    async def get_memberships_for_user(self, user_id: UUID) -> list[CompanyMember]:
        """Get all memberships of a user."""
        ...

    async def list_memberships(self) -> list[CompanyMember]:
        """Get every membership row."""
        ...

    async def upsert_member(
        self, company_id: UUID, user_id: UUID, role: CompanyRole
    ) -> CompanyMember:
        """Insert a membership or update the role of the existing one."""
        ...

    async def remove_members_for_user(self, user_id: UUID) -> int:
        """Remove all memberships of a user. Returns count removed."""
        ...

    async def remove_members_for_company(self, company_id: UUID) -> int:
        """Remove all memberships of a company. Returns count removed."""
        ...
