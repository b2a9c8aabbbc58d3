"""Identity and session entities returned by the identity provider."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID


class SessionMethod(StrEnum):
    """How a session was obtained."""

    EXISTING_SESSION = "existing_session"
    AUTH_CODE = "auth_code"
    ONE_TIME_TOKEN = "one_time_token"
    TOKEN_PAIR = "token_pair"


@dataclass
class Identity:
    """A person record owned by the identity provider."""

    id: UUID
    email: str
    display_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    email_confirmed_at: datetime | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None

    @property
    def tenant_hint(self) -> UUID | None:
        """Company id carried in ``user_metadata``, if any.

        Set when an administrator issues the invitation, but the user can
        rewrite their own metadata. Callers must confirm it against an
        invitation before acting on it.
        """
        raw = self.metadata.get("client_id")
        if not raw:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            return None


@dataclass(frozen=True)
class AuthSession:
    """An access/refresh token pair proving who a request is made for."""

    access_token: str
    refresh_token: str = ""
    expires_at: int | None = None
    token_type: str = "bearer"

    def __repr__(self) -> str:
        return f"AuthSession(expires_at={self.expires_at!r})"


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a successful session attempt."""

    session: AuthSession
    identity: Identity
    method: SessionMethod


@dataclass(frozen=True)
class LinkResult:
    """Outcome of a one-time link request.

    ``sent`` is what the caller may tell the user. It is always true for
    self-service requests so that responses never reveal whether an
    address is registered.
    """

    email: str
    sent: bool = True
    redirect_to: str | None = None


@dataclass(frozen=True)
class CredentialResult:
    """Outcome of a successful password update."""

    identity: Identity
