"""Company service layer with business logic."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import CompanyNotFoundError, InvalidRoleError
from domain.entities.company import COMPANY_ROLES, Company, CompanyMember, CompanyRole
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class CompanyService:
    """Service layer for companies and their memberships."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_companies(self) -> list[Company]:
        """Get every company, ordered by name."""
        async with self._uow_factory() as uow:
            return await uow.companies.list_all()

    async def get_user_companies(self, user_id: UUID) -> list[Company]:
        """Get the companies a user belongs to."""
        async with self._uow_factory() as uow:
            return await uow.companies.get_all_for_user(user_id)

    async def get_company(self, company_id: UUID) -> tuple[Company, list[CompanyMember]]:
        """Get a company together with its members.

        Raises:
            CompanyNotFoundError: If the company does not exist
        """
        async with self._uow_factory() as uow:
            company = await uow.companies.get(company_id)
            if not company:
                raise CompanyNotFoundError(str(company_id))
            members = await uow.companies.get_members(company_id)
            return company, members

    async def create_company(self, company: Company) -> Company:
        async with self._uow_factory() as uow:
            created = await uow.companies.create(company)
            await uow.commit()
        logger.info("company_created", company_id=str(created.id))
        return created

    async def update_company(
        self,
        company_id: UUID,
        company: str | None = None,
        name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
        description: str | None = None,
    ) -> Company:
        """Update a company's details. Fields left as None are unchanged.

        Raises:
            CompanyNotFoundError: If the company does not exist
        """
        async with self._uow_factory() as uow:
            existing = await uow.companies.get(company_id)
            if not existing:
                raise CompanyNotFoundError(str(company_id))

            if company is not None:
                existing.company = company
            if name is not None:
                existing.name = name
            if phone is not None:
                existing.phone = phone
            if email is not None:
                existing.email = email
            if description is not None:
                existing.description = description

            updated = await uow.companies.update(existing)
            await uow.commit()

        logger.info("company_updated", company_id=str(company_id))
        return updated

    async def delete_company(self, company_id: UUID) -> None:
        """Delete a company with its memberships and invitations.

        Raises:
            CompanyNotFoundError: If the company does not exist
        """
        async with self._uow_factory() as uow:
            if not await uow.companies.get(company_id):
                raise CompanyNotFoundError(str(company_id))

            members = await uow.companies.remove_members_for_company(company_id)
            invitations = await uow.invitations.delete_for_company(company_id)
            await uow.companies.delete(company_id)
            await uow.commit()

        logger.info(
            "company_deleted",
            company_id=str(company_id),
            members_removed=members,
            invitations_removed=invitations,
        )

    async def add_user_to_company(
        self,
        company_id: UUID,
        user_id: UUID,
        role: str = CompanyRole.MEMBER.value,
    ) -> tuple[CompanyMember, bool]:
        """Add a user to a company, or change their role if already a member.

        Returns:
            Tuple of (membership, created). ``created`` is False when an
            existing membership was updated.

        Raises:
            InvalidRoleError: If ``role`` is not a company role
            CompanyNotFoundError: If the company does not exist
        """
        if role not in COMPANY_ROLES:
            raise InvalidRoleError(role, COMPANY_ROLES)

        async with self._uow_factory() as uow:
            if not await uow.companies.get(company_id):
                raise CompanyNotFoundError(str(company_id))

            existing = await uow.companies.get_member(company_id, user_id)
            member = await uow.companies.upsert_member(company_id, user_id, CompanyRole(role))
            await uow.commit()

        logger.info(
            "company_member_saved",
            company_id=str(company_id),
            user_id=str(user_id),
            role=role,
            created=existing is None,
        )
        return member, existing is None
