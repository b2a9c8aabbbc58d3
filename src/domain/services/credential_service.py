"""Password setup for an authenticated session."""

import structlog

from core.config import settings
from core.exceptions import PasswordValidationError
from domain.entities.identity import AuthSession, CredentialResult
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()


class CredentialService:
    """Validates and commits a new password for the session's identity."""

    def __init__(
        self,
        provider: IIdentityProvider,
        min_length: int = settings.password_min_length,
    ) -> None:
        self._provider = provider
        self._min_length = min_length

    def validate(self, new_password: str, confirm_password: str) -> None:
        """Check a password pair before it is sent anywhere.

        Raises:
            PasswordValidationError: If the passwords differ or are too short
        """
        if new_password != confirm_password:
            raise PasswordValidationError("Passwords do not match")
        if len(new_password) < self._min_length:
            raise PasswordValidationError(
                f"Password must be at least {self._min_length} characters"
            )

    async def set_password(
        self,
        session: AuthSession,
        new_password: str,
        confirm_password: str,
    ) -> CredentialResult:
        """Set the password of the identity behind ``session``.

        Raises:
            PasswordValidationError: If the password pair is rejected locally
            ProviderError: If the provider refuses the update
        """
        self.validate(new_password, confirm_password)
        identity = await self._provider.update_password(session.access_token, new_password)
        logger.info("password_set", user_id=str(identity.id))
        return CredentialResult(identity=identity)
