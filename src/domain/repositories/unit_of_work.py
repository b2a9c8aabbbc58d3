"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.company_repository import ICompanyRepository
from domain.repositories.invitation_repository import IInvitationRepository
from domain.repositories.user_role_repository import IUserRoleRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    companies: ICompanyRepository
    invitations: IInvitationRepository
    user_roles: IUserRoleRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
