"""Authentication provider protocols."""

from dataclasses import dataclass
from typing import Any, Optional, Protocol
from uuid import UUID

from domain.entities.identity import AuthSession, Identity, LinkResult


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token."""

    id: UUID
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for bearer token validation."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """
        Create an authentication token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated token string
        """
        ...


class IIdentityProvider(Protocol):
    """Protocol for the hosted identity provider.

    Every method raises ``ProviderError`` when the provider rejects the
    request, except ``get_user`` which returns None for an invalid or
    expired token.
    """

    async def get_user(self, access_token: str) -> Identity | None:
        """Read the identity behind an access token."""
        ...

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None = None
    ) -> tuple[AuthSession, Identity]:
        """Exchange an authorization code for a session."""
        ...

    async def verify_one_time_token(
        self, token_hash: str, token_type: str
    ) -> tuple[AuthSession, Identity]:
        """Exchange a one-time (invite/recovery/magic link) token for a session."""
        ...

    async def set_session_from_token_pair(
        self, access_token: str, refresh_token: str | None
    ) -> tuple[AuthSession, Identity]:
        """Adopt a session directly from an access/refresh token pair."""
        ...

    async def update_password(self, access_token: str, password: str) -> Identity:
        """Set a new password for the identity behind the session."""
        ...

    async def send_one_time_link(self, email: str, redirect_to: str) -> LinkResult:
        """Email a one-time sign-in link."""
        ...

    async def invite_user_by_email(
        self, email: str, redirect_to: str, data: dict[str, Any] | None = None
    ) -> Identity:
        """Create an identity and email it an invitation (service role)."""
        ...

    async def generate_magic_link(self, email: str, redirect_to: str) -> LinkResult:
        """Issue a magic link for an existing identity (service role)."""
        ...

    async def list_users(self) -> list[Identity]:
        """List all identities (service role)."""
        ...

    async def find_user_by_email(self, email: str) -> Identity | None:
        """Find an identity by email address (service role)."""
        ...

    async def delete_user(self, user_id: UUID) -> None:
        """Delete an identity (service role)."""
        ...
