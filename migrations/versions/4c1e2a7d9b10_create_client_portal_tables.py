"""create_client_portal_tables

Revision ID: 4c1e2a7d9b10
Revises:
Create Date: 2026-03-02 10:12:44.102938

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e2a7d9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create companies, memberships, global roles and pending invitations."""
    op.create_table('clients',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('company', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_owner_id', 'clients', ['owner_id'], unique=False)

    op.create_table('client_users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('client_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='member'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint("role IN ('admin', 'member', 'viewer')", name='ck_client_users_role'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # Target of the membership upsert's ON CONFLICT clause
        sa.UniqueConstraint('client_id', 'user_id', name='uq_client_users_client_user'),
    )
    op.create_index('ix_client_users_user_id', 'client_users', ['user_id'], unique=False)

    op.create_table('user_roles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint("role IN ('admin', 'user')", name='ck_user_roles_role'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table('pending_invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('client_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='member'),
        sa.Column('name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        sa.Column('claimed_by', sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    # Index for claiming invitations by company + email
    op.create_index('ix_pending_invitations_client_email', 'pending_invitations', ['client_id', 'email'], unique=False)


def downgrade() -> None:
    """Drop client portal tables."""
    op.drop_index('ix_pending_invitations_client_email', table_name='pending_invitations')
    op.drop_table('pending_invitations')
    op.drop_table('user_roles')
    op.drop_index('ix_client_users_user_id', table_name='client_users')
    op.drop_table('client_users')
    op.drop_index('ix_clients_owner_id', table_name='clients')
    op.drop_table('clients')
