"""User administration and capability resolution."""

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from core.exceptions import CannotDeleteSelfError
from domain.entities.company import Company, CompanyRole
from domain.entities.identity import Identity
from domain.entities.user_role import Capabilities, GlobalRole, UserRole
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()


@dataclass
class UserSummary:
    """An identity combined with its global role and companies."""

    identity: Identity
    role: GlobalRole = GlobalRole.USER
    companies: list[tuple[Company, CompanyRole]] = field(default_factory=list)


class UserService:
    """Service layer for users, their roles and capabilities."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        provider: IIdentityProvider,
    ) -> None:
        self._uow_factory = uow_factory
        self._provider = provider

    async def resolve_capabilities(self, user_id: UUID, email: str) -> Capabilities:
        """Resolve what a user may do. Users without a role row are plain users."""
        async with self._uow_factory() as uow:
            role_row = await uow.user_roles.get(user_id)
            memberships = await uow.companies.get_memberships_for_user(user_id)

        return Capabilities(
            user_id=user_id,
            email=email,
            global_role=role_row.role if role_row else GlobalRole.USER,
            company_roles={m.company_id: m.role for m in memberships},
        )

    async def set_role(self, user_id: UUID, role: GlobalRole) -> UserRole:
        async with self._uow_factory() as uow:
            updated = await uow.user_roles.set(user_id, role)
            await uow.commit()
        logger.info("global_role_set", user_id=str(user_id), role=role.value)
        return updated

    async def list_users(self) -> list[UserSummary]:
        """List every identity with its global role and company memberships."""
        identities = await self._provider.list_users()

        async with self._uow_factory() as uow:
            roles = {row.user_id: row.role for row in await uow.user_roles.list_all()}
            companies = {c.id: c for c in await uow.companies.list_all()}
            memberships = await uow.companies.list_memberships()

        by_user: dict[UUID, list[tuple[Company, CompanyRole]]] = defaultdict(list)
        for member in memberships:
            company = companies.get(member.company_id)
            if company is not None:
                by_user[member.user_id].append((company, member.role))

        return [
            UserSummary(
                identity=identity,
                role=roles.get(identity.id, GlobalRole.USER),
                companies=by_user.get(identity.id, []),
            )
            for identity in identities
        ]

    async def delete_user(self, actor_id: UUID, user_id: UUID) -> None:
        """Delete a user's memberships, role and identity, in that order.

        Raises:
            CannotDeleteSelfError: If ``actor_id`` and ``user_id`` match
            ProviderError: If the provider refuses to delete the identity
        """
        if actor_id == user_id:
            raise CannotDeleteSelfError()

        async with self._uow_factory() as uow:
            memberships = await uow.companies.remove_members_for_user(user_id)
            await uow.user_roles.delete(user_id)
            await uow.commit()

        await self._provider.delete_user(user_id)
        logger.info("user_deleted", user_id=str(user_id), memberships_removed=memberships)
