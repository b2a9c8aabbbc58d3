"""add_rls_policies

Revision ID: 8f3b6d21c7e5
Revises: 4c1e2a7d9b10
Create Date: 2026-03-02 10:31:09.554120

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8f3b6d21c7e5"
down_revision: str | Sequence[str] | None = "4c1e2a7d9b10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = ["clients", "client_users", "user_roles", "pending_invitations"]


def upgrade() -> None:
    """Add Row Level Security policies for direct Supabase client access.

    The API connects with a role that bypasses RLS and enforces admin
    checks itself. These policies only govern what a signed-in user can
    read through the Supabase client: their own rows, plus everything for
    global admins.
    """
    # SECURITY DEFINER so the check does not recurse into user_roles' own policy
    op.execute("""
        CREATE OR REPLACE FUNCTION is_portal_admin(uid UUID)
        RETURNS BOOLEAN
        LANGUAGE sql
        SECURITY DEFINER
        STABLE
        SET search_path = public
        AS $$
            SELECT EXISTS (
                SELECT 1 FROM user_roles WHERE user_id = uid AND role = 'admin'
            );
        $$;
    """)

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")

    # --- Clients: members see their companies ---
    op.execute("""
        CREATE POLICY clients_select ON clients
            FOR SELECT USING (
                is_portal_admin((SELECT auth.uid()))
                OR id IN (
                    SELECT client_id FROM client_users
                    WHERE user_id = (SELECT auth.uid())
                )
            );
    """)

    # --- Client users: own memberships ---
    op.execute("""
        CREATE POLICY client_users_select ON client_users
            FOR SELECT USING (
                is_portal_admin((SELECT auth.uid()))
                OR user_id = (SELECT auth.uid())
            );
    """)

    # --- User roles: own role ---
    op.execute("""
        CREATE POLICY user_roles_select ON user_roles
            FOR SELECT USING (
                is_portal_admin((SELECT auth.uid()))
                OR user_id = (SELECT auth.uid())
            );
    """)

    # --- Pending invitations: admins only ---
    op.execute("""
        CREATE POLICY pending_invitations_select ON pending_invitations
            FOR SELECT USING (is_portal_admin((SELECT auth.uid())));
    """)


def downgrade() -> None:
    """Remove RLS policies."""
    op.execute("DROP POLICY IF EXISTS pending_invitations_select ON pending_invitations;")
    op.execute("DROP POLICY IF EXISTS user_roles_select ON user_roles;")
    op.execute("DROP POLICY IF EXISTS client_users_select ON client_users;")
    op.execute("DROP POLICY IF EXISTS clients_select ON clients;")

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")

    op.execute("DROP FUNCTION IF EXISTS is_portal_admin(UUID);")
