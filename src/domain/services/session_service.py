"""Session establishment for inbound links."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import NoCredentialError, ProviderError
from domain.entities.identity import AuthSession, LinkResult, SessionMethod, SessionResult
from domain.entities.link_intent import LinkIntent
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()

# An attempt returns None when it does not apply to the intent
SessionAttempt = Callable[[], Awaitable[SessionResult | None]]


@dataclass(frozen=True)
class SessionContext:
    """Credentials the caller already holds, outside of the link itself."""

    current_session: AuthSession | None = None
    code_verifier: str | None = None


class SessionService:
    """Obtains an authenticated session from a LinkIntent.

    Attempts run in a fixed order until one succeeds:

    1. the caller's existing session, if still valid
    2. an authorization code exchange
    3. one-time token verification (invite / recovery / magic link)
    4. an access/refresh token pair

    A provider error in one attempt is logged and the next attempt runs.
    If every applicable attempt failed, the last provider error is raised
    unchanged; if none applied, ``NoCredentialError`` is raised.
    """

    def __init__(self, provider: IIdentityProvider) -> None:
        self._provider = provider

    async def establish(
        self,
        intent: LinkIntent,
        context: SessionContext | None = None,
    ) -> SessionResult:
        """Run the ordered attempts for an intent.

        Raises:
            NoCredentialError: If the intent carries nothing usable
            ProviderError: If the last applicable attempt was rejected
        """
        context = context or SessionContext()
        attempts: list[tuple[str, SessionAttempt]] = [
            ("existing_session", lambda: self._from_existing_session(context.current_session)),
            ("auth_code", lambda: self._from_auth_code(intent, context.code_verifier)),
            ("one_time_token", lambda: self._from_one_time_token(intent)),
            ("token_pair", lambda: self._from_token_pair(intent)),
        ]

        last_error: ProviderError | None = None
        for name, attempt in attempts:
            try:
                result = await attempt()
            except ProviderError as e:
                logger.warning("session_attempt_failed", attempt=name, error=e.message)
                last_error = e
                continue
            if result is not None:
                logger.info(
                    "session_established",
                    method=result.method.value,
                    user_id=str(result.identity.id),
                )
                return result

        if last_error is not None:
            raise last_error
        raise NoCredentialError()

    async def _from_existing_session(
        self, session: AuthSession | None
    ) -> SessionResult | None:
        if session is None or not session.access_token:
            return None
        identity = await self._provider.get_user(session.access_token)
        if identity is None:
            return None
        return SessionResult(session=session, identity=identity, method=SessionMethod.EXISTING_SESSION)

    async def _from_auth_code(
        self, intent: LinkIntent, code_verifier: str | None
    ) -> SessionResult | None:
        if not intent.auth_code:
            return None
        session, identity = await self._provider.exchange_code_for_session(
            intent.auth_code, code_verifier
        )
        return SessionResult(session=session, identity=identity, method=SessionMethod.AUTH_CODE)

    async def _from_one_time_token(self, intent: LinkIntent) -> SessionResult | None:
        if not intent.has_verifiable_token or intent.one_time_token is None:
            return None
        token_type = intent.token_type or "invite"
        if token_type == "magiclink":
            token_type = "email"
        session, identity = await self._provider.verify_one_time_token(
            intent.one_time_token, token_type
        )
        return SessionResult(session=session, identity=identity, method=SessionMethod.ONE_TIME_TOKEN)

    async def _from_token_pair(self, intent: LinkIntent) -> SessionResult | None:
        if not intent.has_access_token or intent.access_token is None:
            return None
        session, identity = await self._provider.set_session_from_token_pair(
            intent.access_token, intent.refresh_token
        )
        return SessionResult(session=session, identity=identity, method=SessionMethod.TOKEN_PAIR)

    async def request_link(self, email: str, tenant_id: UUID | None = None) -> LinkResult:
        """Send a fresh one-time sign-in link.

        Always reports the link as sent, whether or not the address is
        registered or the provider accepted the request.
        """
        email = email.lower().strip()
        redirect_to = callback_url(tenant_id)
        try:
            return await self._provider.send_one_time_link(email, redirect_to)
        except ProviderError as e:
            logger.warning("magic_link_send_failed", error=e.message)
            return LinkResult(email=email, sent=True, redirect_to=redirect_to)


def callback_url(tenant_id: UUID | None) -> str:
    """Absolute URL of the auth callback, carrying the tenant if known."""
    base = f"{settings.site_base_url}/auth/callback"
    if tenant_id is None:
        return base
    return f"{base}?client_id={tenant_id}"
