"""SQLAlchemy implementation of PendingInvitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.company import CompanyRole
from domain.entities.invitation import PendingInvitation
from infrastructure.database.models import PendingInvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: PendingInvitation) -> PendingInvitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_for_company(self, company_id: UUID) -> list[PendingInvitation]:
        """Get all invitations for a company."""
        stmt = (
            select(PendingInvitationModel)
            .where(PendingInvitationModel.client_id == company_id)
            .order_by(PendingInvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_company_email(
        self, company_id: UUID, email: str
    ) -> list[PendingInvitation]:
        """Get invitations (claimed or not) for a company and email."""
        stmt = (
            select(PendingInvitationModel)
            .where(
                PendingInvitationModel.client_id == company_id,
                func.lower(PendingInvitationModel.email) == email.lower().strip(),
            )
            .order_by(PendingInvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def claim_unclaimed(self, company_id: UUID, email: str, user_id: UUID) -> int:
        """Claim every still-unclaimed invitation for a company and email."""
        stmt = (
            update(PendingInvitationModel)
            .where(
                PendingInvitationModel.client_id == company_id,
                func.lower(PendingInvitationModel.email) == email.lower().strip(),
                PendingInvitationModel.claimed_at.is_(None),
            )
            .values(claimed_at=datetime.utcnow(), claimed_by=user_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def delete_for_company(self, company_id: UUID) -> int:
        """Delete all invitations of a company."""
        stmt = delete(PendingInvitationModel).where(PendingInvitationModel.client_id == company_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: PendingInvitationModel) -> PendingInvitation:
        """Convert ORM model to domain entity."""
        return PendingInvitation(
            id=model.id,
            email=model.email,
            company_id=model.client_id,
            role=CompanyRole(model.role),
            name=model.name,
            created_at=model.created_at,
            claimed_at=model.claimed_at,
            claimed_by=model.claimed_by,
        )

    def _to_model(self, entity: PendingInvitation) -> PendingInvitationModel:
        """Convert domain entity to ORM model."""
        return PendingInvitationModel(
            id=entity.id,
            email=entity.email,
            client_id=entity.company_id,
            role=entity.role.value,
            name=entity.name,
            created_at=entity.created_at,
            claimed_at=entity.claimed_at,
            claimed_by=entity.claimed_by,
        )
