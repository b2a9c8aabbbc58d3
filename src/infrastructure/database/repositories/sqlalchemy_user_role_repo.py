"""SQLAlchemy implementation of UserRole repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.user_role import GlobalRole, UserRole
from infrastructure.database.dialect import upsert_insert
from infrastructure.database.models import UserRoleModel


class SQLAlchemyUserRoleRepository:
    """SQLAlchemy implementation of IUserRoleRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID) -> UserRole | None:
        """Get the role row for a user."""
        stmt = (
            select(UserRoleModel)
            .where(UserRoleModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[UserRole]:
        """Get every role row."""
        result = await self._session.execute(select(UserRoleModel))
        return [self._to_entity(model) for model in result.scalars()]

    async def ensure(self, user_id: UUID, role: GlobalRole) -> bool:
        """Insert a role row unless the user already has one."""
        stmt = (
            upsert_insert(self._session, UserRoleModel)
            .values(user_id=user_id, role=role.value)
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def set(self, user_id: UUID, role: GlobalRole) -> UserRole:
        """Insert or overwrite the role row for a user."""
        stmt = upsert_insert(self._session, UserRoleModel).values(
            user_id=user_id, role=role.value
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={"role": stmt.excluded.role},
        )
        await self._session.execute(stmt)

        updated = await self.get(user_id)
        if updated is None:
            raise ValueError(f"Role for user {user_id} missing after upsert")
        return updated

    async def delete(self, user_id: UUID) -> bool:
        """Delete the role row for a user."""
        stmt = delete(UserRoleModel).where(UserRoleModel.user_id == user_id)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return bool(result.rowcount)  # type: ignore[attr-defined]

    def _to_entity(self, model: UserRoleModel) -> UserRole:
        """Convert ORM model to domain entity."""
        return UserRole(
            id=model.id,
            user_id=model.user_id,
            role=GlobalRole(model.role),
            created_at=model.created_at,
        )
