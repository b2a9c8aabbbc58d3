"""Identity linking flow: link → session → password → company → dashboard.

One ``OnboardingFlow`` instance handles one request. Nothing is kept
between requests; a reload simply runs the flow again, which is safe
because every write downstream is idempotent.
"""

from collections.abc import Callable, Mapping
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import NoCredentialError, PasswordValidationError, ProviderError
from domain.entities.identity import AuthSession, Identity
from domain.entities.link_intent import LinkIntent
from domain.entities.onboarding import (
    DASHBOARD_PATH,
    TRANSITIONS,
    FailureReason,
    FlowOutcome,
    FlowState,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.credential_service import CredentialService
from domain.services.link_parser import parse_link
from domain.services.session_service import SessionContext, SessionService
from domain.services.tenant_linker import TenantLinker

logger = structlog.get_logger()


class OnboardingFlow:
    """State machine sequencing the onboarding steps."""

    def __init__(
        self,
        sessions: SessionService,
        credentials: CredentialService,
        linker: TenantLinker,
        uow_factory: Callable[[], IUnitOfWork],
    ) -> None:
        self._sessions = sessions
        self._credentials = credentials
        self._linker = linker
        self._uow_factory = uow_factory
        self.state = FlowState.START
        self.history: list[FlowState] = [FlowState.START]
        self.intent: LinkIntent | None = None

    def _move(self, target: FlowState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal onboarding transition {self.state} -> {target}")
        self.state = target
        self.history.append(target)

    def _resume(self, state: FlowState) -> None:
        """Re-enter a mid-flow state after a reload or a new request."""
        self.state = state
        self.history.append(state)

    async def start(
        self,
        query: Mapping[str, Any] | None = None,
        fragment: str | None = None,
        context: SessionContext | None = None,
    ) -> FlowOutcome:
        """Parse a link and establish a session from it."""
        self._move(FlowState.PARSING_LINK)
        intent = parse_link(query, fragment)
        self.intent = intent

        self._move(FlowState.ESTABLISHING_SESSION)
        try:
            result = await self._sessions.establish(intent, context)
        except NoCredentialError as e:
            return self._fail(FailureReason.NO_CREDENTIAL, e.message, intent.email, intent.tenant_id)
        except ProviderError as e:
            return self._fail(FailureReason.PROVIDER_ERROR, e.message, intent.email, intent.tenant_id)

        self._move(FlowState.AWAITING_PASSWORD)
        return FlowOutcome(
            state=self.state,
            session=result.session,
            identity=result.identity,
            tenant_id=intent.tenant_id or result.identity.tenant_hint,
        )

    async def submit_password(
        self,
        session: AuthSession,
        new_password: str,
        confirm_password: str,
        tenant_hint: UUID | None = None,
    ) -> FlowOutcome:
        """Set the password, link the company if one resolves, and finish."""
        if self.state != FlowState.AWAITING_PASSWORD:
            self._resume(FlowState.AWAITING_PASSWORD)

        try:
            credential = await self._credentials.set_password(
                session, new_password, confirm_password
            )
        except PasswordValidationError as e:
            self._move(FlowState.AWAITING_PASSWORD)
            return FlowOutcome(
                state=self.state, message=e.message, session=session, tenant_id=tenant_hint
            )
        except ProviderError as e:
            return self._fail(FailureReason.PROVIDER_ERROR, e.message, None, tenant_hint)

        identity = credential.identity
        tenant_id = await self.resolve_tenant(identity, tenant_hint)
        if tenant_id is not None:
            self._move(FlowState.LINKING_TENANT)
            await self._linker.link_tenant(identity, tenant_id)

        self._move(FlowState.DONE)
        logger.info("onboarding_completed", user_id=str(identity.id), linked=tenant_id is not None)
        return FlowOutcome(
            state=self.state,
            session=session,
            identity=identity,
            tenant_id=tenant_id,
            redirect_to=DASHBOARD_PATH,
        )

    async def resolve_tenant(self, identity: Identity, hint: UUID | None) -> UUID | None:
        """Decide which company, if any, the identity should be linked to.

        The company in the identity's metadata takes precedence over a hint
        from the link or the client. Users can rewrite their own metadata,
        so neither is trusted on its own: the candidate is only honoured
        when an invitation exists for that company and the identity's email.
        A failed lookup links nothing; the password is already set.
        """
        candidate = identity.tenant_hint
        if candidate is not None and hint is not None and hint != candidate:
            logger.warning(
                "tenant_hint_mismatch",
                user_id=str(identity.id),
                hint=str(hint),
                metadata=str(candidate),
            )
        if candidate is None:
            candidate = hint
        if candidate is None:
            return None

        try:
            async with self._uow_factory() as uow:
                invitations = await uow.invitations.get_for_company_email(
                    candidate, identity.email
                )
        except Exception:
            logger.exception(
                "tenant_lookup_failed", user_id=str(identity.id), tenant_id=str(candidate)
            )
            return None
        if invitations:
            return candidate

        logger.warning("tenant_hint_unconfirmed", user_id=str(identity.id), hint=str(candidate))
        return None

    def _fail(
        self,
        reason: FailureReason,
        message: str,
        email: str | None,
        tenant_id: UUID | None,
    ) -> FlowOutcome:
        self._move(FlowState.FAILED)
        logger.info("onboarding_failed", reason=reason.value, can_resend=email is not None)
        return FlowOutcome(
            state=self.state,
            failure=reason,
            message=message,
            tenant_id=tenant_id,
            resend_email=email,
        )
