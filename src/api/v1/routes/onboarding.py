"""Onboarding API routes: link → session → password → company."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Request, status

from api.dependencies.auth import CODE_VERIFIER_COOKIE, CurrentSession
from api.dependencies.services import get_onboarding_flow, get_session_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.onboarding import (
    FlowOutcomeResponse,
    MagicLinkRequest,
    MagicLinkResponse,
    SetPasswordRequest,
    StartOnboardingRequest,
)
from core.exceptions import NoCredentialError
from core.rate_limit import LINK_SEND_LIMIT, WRITE_LIMIT, limiter
from domain.entities.identity import AuthSession
from domain.services.onboarding_flow import OnboardingFlow
from domain.services.session_service import SessionContext, SessionService

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post(
    "/session",
    response_model=FlowOutcomeResponse,
    summary="Establish a session from an inbound link",
    responses={
        200: {"description": "Session established (awaiting_password) or flow failed"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def start_onboarding(
    request: Request,
    body: StartOnboardingRequest,
    current_session: CurrentSession,
    code_verifier: Annotated[str | None, Cookie(alias=CODE_VERIFIER_COOKIE)] = None,
    flow: OnboardingFlow = Depends(get_onboarding_flow),
) -> FlowOutcomeResponse:
    """
    Parse the link the user followed and exchange it for a session.

    A failed outcome carries ``resend_email`` when a fresh link can be
    requested from ``/onboarding/magic-link``.
    """
    outcome = await flow.start(
        query=body.query,
        fragment=body.fragment,
        context=SessionContext(current_session=current_session, code_verifier=code_verifier),
    )
    return FlowOutcomeResponse.from_outcome(outcome)


@router.post(
    "/password",
    response_model=FlowOutcomeResponse,
    summary="Set the password and finish onboarding",
    responses={
        200: {"description": "Done, or still awaiting a valid password"},
        401: {"model": ErrorResponse, "description": "No session supplied"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_password(
    request: Request,
    body: SetPasswordRequest,
    current_session: CurrentSession,
    flow: OnboardingFlow = Depends(get_onboarding_flow),
) -> FlowOutcomeResponse:
    """
    Set the password for the session's identity and link its company.

    On success the outcome is ``done`` with ``redirect_to`` set to the
    dashboard. A rejected password leaves the flow in
    ``awaiting_password`` with the reason in ``message``.
    """
    if body.access_token:
        session = AuthSession(access_token=body.access_token, refresh_token=body.refresh_token)
    elif current_session is not None:
        session = current_session
    else:
        raise NoCredentialError()

    outcome = await flow.submit_password(
        session,
        body.new_password,
        body.confirm_password,
        tenant_hint=body.client_id,
    )
    return FlowOutcomeResponse.from_outcome(outcome)


@router.post(
    "/magic-link",
    response_model=MagicLinkResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a fresh sign-in link",
    responses={
        202: {"description": "Accepted, whether or not the address is registered"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
@limiter.limit(LINK_SEND_LIMIT)  # type: ignore[untyped-decorator]
async def request_magic_link(
    request: Request,
    body: MagicLinkRequest,
    service: SessionService = Depends(get_session_service),
) -> MagicLinkResponse:
    """Email a one-time sign-in link that lands back on the auth callback."""
    result = await service.request_link(body.email, body.client_id)
    return MagicLinkResponse(email=result.email)
