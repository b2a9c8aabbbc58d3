"""Pending invitation repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.invitation import PendingInvitation


class IInvitationRepository(Protocol):
    """Repository interface for PendingInvitation entities."""

    async def create(self, invitation: PendingInvitation) -> PendingInvitation:
        """Create a new invitation."""
        ...

    async def get_for_company(self, company_id: UUID) -> list[PendingInvitation]:
        """Get all invitations for a company."""
        ...

    async def get_for_company_email(
        self, company_id: UUID, email: str
    ) -> list[PendingInvitation]:
        """Get invitations (claimed or not) for a company and email."""
        ...

    async def claim_unclaimed(self, company_id: UUID, email: str, user_id: UUID) -> int:
        """Mark unclaimed invitations for a company and email as claimed.

        Rows that are already claimed are left untouched. Returns the
        number of rows claimed.
        """
        ...

    async def delete_for_company(self, company_id: UUID) -> int:
        """Delete all invitations of a company. Returns count removed."""
        ...
