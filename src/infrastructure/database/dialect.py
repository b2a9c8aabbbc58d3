"""Dialect-aware helpers for idempotent writes."""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def upsert_insert(session: AsyncSession, model: Any) -> Any:
    """Return an INSERT construct that supports ``ON CONFLICT`` clauses.

    PostgreSQL in production, SQLite in tests; both expose
    ``on_conflict_do_update`` and ``on_conflict_do_nothing``.
    """
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
