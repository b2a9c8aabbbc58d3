"""Canonical record of what an inbound link is asking for."""

from dataclasses import dataclass
from uuid import UUID

# Link types that carry a one-time token the provider can verify
ONE_TIME_TOKEN_TYPES = frozenset({"invite", "recovery", "email", "magiclink"})


@dataclass(frozen=True)
class LinkIntent:
    """Identity/invitation signals extracted from a link.

    Every field is optional; an empty intent is valid.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    one_time_token: str | None = None
    token_type: str | None = None
    email: str | None = None
    tenant_id: UUID | None = None
    auth_code: str | None = None
    from_invite: bool = False

    @property
    def has_access_token(self) -> bool:
        """An access token is present. The refresh token is optional."""
        return bool(self.access_token)

    @property
    def has_verifiable_token(self) -> bool:
        """A one-time token is present and its type can be verified.

        A missing type is treated as an invitation.
        """
        if not self.one_time_token:
            return False
        return self.token_type is None or self.token_type in ONE_TIME_TOKEN_TYPES

    @property
    def has_any_credential(self) -> bool:
        return bool(self.auth_code or self.one_time_token or self.access_token)

    def __repr__(self) -> str:
        # Tokens are credentials; only report which ones are present
        return (
            "LinkIntent("
            f"access_token={'set' if self.access_token else None}, "
            f"refresh_token={'set' if self.refresh_token else None}, "
            f"one_time_token={'set' if self.one_time_token else None}, "
            f"auth_code={'set' if self.auth_code else None}, "
            f"token_type={self.token_type!r}, email={self.email!r}, "
            f"tenant_id={self.tenant_id!r}, from_invite={self.from_invite!r})"
        )
