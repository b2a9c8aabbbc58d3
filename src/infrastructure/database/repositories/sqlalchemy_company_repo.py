"""SQLAlchemy implementation of Company repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.company import Company, CompanyMember, CompanyRole
from infrastructure.database.dialect import upsert_insert
from infrastructure.database.models import CompanyMemberModel, CompanyModel


class SQLAlchemyCompanyRepository:
    """SQLAlchemy implementation of ICompanyRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Company | None:
        """Get a company by ID."""
        stmt = select(CompanyModel).where(CompanyModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[Company]:
        """Get all companies ordered by name."""
        stmt = select(CompanyModel).order_by(CompanyModel.company)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_for_user(self, user_id: UUID) -> list[Company]:
        """Get all companies a user is a member of."""
        stmt = (
            select(CompanyModel)
            .join(CompanyMemberModel, CompanyMemberModel.client_id == CompanyModel.id)
            .where(CompanyMemberModel.user_id == user_id)
            .order_by(CompanyModel.company)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, company: Company) -> Company:
        """Create a new company."""
        model = self._to_model(company)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, company: Company) -> Company:
        """Update an existing company."""
        stmt = select(CompanyModel).where(CompanyModel.id == company.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Company {company.id} not found")

        model.company = company.company
        model.name = company.name
        model.phone = company.phone
        model.email = company.email
        model.description = company.description

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a company. Memberships and invitations go with it."""
        stmt = delete(CompanyModel).where(CompanyModel.id == id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    async def get_member(self, company_id: UUID, user_id: UUID) -> CompanyMember | None:
        """Get a membership by company and user IDs."""
        stmt = select(CompanyMemberModel).where(
            CompanyMemberModel.client_id == company_id,
            CompanyMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._member_to_entity(model) if model else None

    async def get_members(self, company_id: UUID) -> list[CompanyMember]:
        """Get all memberships of a company."""
        stmt = (
            select(CompanyMemberModel)
            .where(CompanyMemberModel.client_id == company_id)
            .order_by(CompanyMemberModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._member_to_entity(model) for model in result.scalars()]

    async def get_memberships_for_user(self, user_id: UUID) -> list[CompanyMember]:
        """Get all memberships of a user."""
        stmt = (
            select(CompanyMemberModel)
            .where(CompanyMemberModel.user_id == user_id)
            .order_by(CompanyMemberModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._member_to_entity(model) for model in result.scalars()]

    async def list_memberships(self) -> list[CompanyMember]:
        """Get every membership row."""
        stmt = select(CompanyMemberModel).order_by(CompanyMemberModel.created_at)
        result = await self._session.execute(stmt)
        return [self._member_to_entity(model) for model in result.scalars()]

    async def upsert_member(
        self, company_id: UUID, user_id: UUID, role: CompanyRole
    ) -> CompanyMember:
        """Insert a membership, or update the role if the pair already exists."""
        stmt = upsert_insert(self._session, CompanyMemberModel).values(
            client_id=company_id,
            user_id=user_id,
            role=role.value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["client_id", "user_id"],
            set_={"role": stmt.excluded.role},
        )
        await self._session.execute(stmt)

        # Bypass the identity map, which may hold the pre-upsert role
        select_stmt = (
            select(CompanyMemberModel)
            .where(
                CompanyMemberModel.client_id == company_id,
                CompanyMemberModel.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(select_stmt)
        return self._member_to_entity(result.scalar_one())

    async def remove_members_for_user(self, user_id: UUID) -> int:
        """Remove all memberships of a user."""
        stmt = delete(CompanyMemberModel).where(CompanyMemberModel.user_id == user_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def remove_members_for_company(self, company_id: UUID) -> int:
        """Remove all memberships of a company."""
        stmt = delete(CompanyMemberModel).where(CompanyMemberModel.client_id == company_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: CompanyModel) -> Company:
        """Convert ORM model to domain entity."""
        return Company(
            id=model.id,
            company=model.company,
            name=model.name,
            phone=model.phone,
            email=model.email,
            description=model.description,
            owner_id=model.owner_id,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Company) -> CompanyModel:
        """Convert domain entity to ORM model."""
        return CompanyModel(
            id=entity.id,
            company=entity.company,
            name=entity.name,
            phone=entity.phone,
            email=entity.email,
            description=entity.description,
            owner_id=entity.owner_id,
            created_at=entity.created_at,
        )

    def _member_to_entity(self, model: CompanyMemberModel) -> CompanyMember:
        """Convert membership ORM model to domain entity."""
        return CompanyMember(
            company_id=model.client_id,
            user_id=model.user_id,
            role=CompanyRole(model.role),
            created_at=model.created_at,
        )
