"""User role repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user_role import GlobalRole, UserRole


class IUserRoleRepository(Protocol):
    """Repository interface for global user roles."""

    async def get(self, user_id: UUID) -> UserRole | None:
        """Get the role row for a user."""
        ...

    async def list_all(self) -> list[UserRole]:
        """Get every role row."""
        ...

    async def ensure(self, user_id: UUID, role: GlobalRole) -> bool:
        """Insert a role row unless one already exists.

        Never changes an existing row. Returns True if a row was inserted.
        """
        ...

    async def set(self, user_id: UUID, role: GlobalRole) -> UserRole:
        """Insert or overwrite the role row for a user."""
        ...

    async def delete(self, user_id: UUID) -> bool:
        """Delete the role row for a user."""
        ...
