"""Onboarding flow states and outcomes."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from domain.entities.identity import AuthSession, Identity


class FlowState(StrEnum):
    """States of the identity linking flow."""

    START = "start"
    PARSING_LINK = "parsing_link"
    ESTABLISHING_SESSION = "establishing_session"
    AWAITING_PASSWORD = "awaiting_password"
    LINKING_TENANT = "linking_tenant"
    DONE = "done"
    FAILED = "failed"


class FailureReason(StrEnum):
    """Why the flow reached the failed state."""

    NO_CREDENTIAL = "no_credential"
    PROVIDER_ERROR = "provider_error"


# Allowed transitions; anything else is a programming error
TRANSITIONS: dict[FlowState, frozenset[FlowState]] = {
    FlowState.START: frozenset({FlowState.PARSING_LINK}),
    FlowState.PARSING_LINK: frozenset({FlowState.ESTABLISHING_SESSION}),
    FlowState.ESTABLISHING_SESSION: frozenset({FlowState.AWAITING_PASSWORD, FlowState.FAILED}),
    FlowState.AWAITING_PASSWORD: frozenset(
        {
            FlowState.AWAITING_PASSWORD,
            FlowState.LINKING_TENANT,
            FlowState.DONE,
            FlowState.FAILED,
        }
    ),
    FlowState.LINKING_TENANT: frozenset({FlowState.DONE}),
    FlowState.DONE: frozenset(),
    FlowState.FAILED: frozenset(),
}

DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"
SETUP_PASSWORD_PATH = "/auth/setup-password"


@dataclass(frozen=True)
class FlowOutcome:
    """Where the flow stopped and what the client should do next.

    ``resend_email`` is set when a fresh one-time link can be offered.
    """

    state: FlowState
    failure: FailureReason | None = None
    message: str | None = None
    session: AuthSession | None = None
    identity: Identity | None = None
    tenant_id: UUID | None = None
    resend_email: str | None = None
    redirect_to: str | None = None

    @property
    def can_resend_link(self) -> bool:
        return self.resend_email is not None
