"""SQLAlchemy ORM models.

User ids reference identities owned by the identity provider
(``auth.users`` in Supabase) and are stored as plain UUID columns.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CompanyModel(Base):
    """Client company (tenant) model."""

    __tablename__ = "clients"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    members: Mapped[list["CompanyMemberModel"]] = relationship(
        "CompanyMemberModel",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    invitations: Mapped[list["PendingInvitationModel"]] = relationship(
        "PendingInvitationModel",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CompanyMemberModel(Base):
    """Company membership model, unique per (client_id, user_id)."""

    __tablename__ = "client_users"
    __table_args__ = (
        UniqueConstraint("client_id", "user_id", name="uq_client_users_client_user"),
        CheckConstraint("role IN ('admin', 'member', 'viewer')", name="ck_client_users_role"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    client_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    company: Mapped["CompanyModel"] = relationship(
        "CompanyModel",
        back_populates="members",
    )


class UserRoleModel(Base):
    """Global (portal-wide) role, one row per user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_user_roles_role"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class PendingInvitationModel(Base):
    """Outstanding invitation of an email address into a company."""

    __tablename__ = "pending_invitations"
    __table_args__ = (
        Index("ix_pending_invitations_client_email", "client_id", "email"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    client_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime)
    claimed_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))

    # Relationships
    company: Mapped["CompanyModel"] = relationship(
        "CompanyModel",
        back_populates="invitations",
    )
