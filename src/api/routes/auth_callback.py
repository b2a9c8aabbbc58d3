"""Server-side landing route for links sent by email."""

from typing import Annotated
from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Cookie, Depends, Request, status
from fastapi.responses import RedirectResponse

from api.dependencies.auth import ACCESS_TOKEN_COOKIE, CODE_VERIFIER_COOKIE, REFRESH_TOKEN_COOKIE
from api.dependencies.services import get_session_service
from core.config import settings
from core.exceptions import AppException
from core.rate_limit import WRITE_LIMIT, limiter
from domain.entities.identity import AuthSession
from domain.entities.link_intent import LinkIntent
from domain.entities.onboarding import LOGIN_PATH, SETUP_PASSWORD_PATH
from domain.services.session_service import SessionContext, SessionService

logger = structlog.get_logger()

router = APIRouter(tags=["auth"])


def _redirect(path: str, params: dict[str, str] | None = None) -> RedirectResponse:
    url = f"{settings.site_base_url}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _set_session_cookies(response: RedirectResponse, session: AuthSession) -> None:
    options = {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
        "path": "/",
    }
    response.set_cookie(ACCESS_TOKEN_COOKIE, session.access_token, **options)  # type: ignore[arg-type]
    if session.refresh_token:
        response.set_cookie(REFRESH_TOKEN_COOKIE, session.refresh_token, **options)  # type: ignore[arg-type]


@router.get(
    "/auth/callback",
    response_class=RedirectResponse,
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Email link landing",
    responses={303: {"description": "Redirect to password setup or login"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def auth_callback(
    request: Request,
    code_verifier: Annotated[str | None, Cookie(alias=CODE_VERIFIER_COOKIE)] = None,
    service: SessionService = Depends(get_session_service),
) -> RedirectResponse:
    """
    Land an invitation, magic link or recovery link.

    Authorization codes and recovery tokens are redeemed here and the
    session is stored in cookies. Other tokens are forwarded to the
    password setup page, which redeems them itself. Without anything
    usable the user is sent to the login page.
    """
    query = request.query_params
    code = query.get("code")
    token = query.get("token")
    token_type = query.get("type")
    invite_token = query.get("invite_token")

    setup_params = {"from": "invite"}
    if query.get("client_id"):
        setup_params["client_id"] = query["client_id"]
    if query.get("email"):
        setup_params["email"] = query["email"]

    def forward_token(value: str, value_type: str | None) -> RedirectResponse:
        params = {**setup_params, "token": value}
        if value_type:
            params["type"] = value_type
        return _redirect(SETUP_PASSWORD_PATH, params)

    if invite_token:
        return forward_token(invite_token, "invite")

    if token and not code and token_type != "recovery":
        return forward_token(token, token_type)

    if code or token:
        intent = (
            LinkIntent(auth_code=code)
            if code
            else LinkIntent(one_time_token=token, token_type="recovery")
        )
        try:
            result = await service.establish(intent, SessionContext(code_verifier=code_verifier))
        except AppException as e:
            logger.warning("auth_callback_failed", error_code=e.error_code.value, error=e.message)
            if token:
                return forward_token(token, token_type)
            return _redirect(LOGIN_PATH)

        response = _redirect(SETUP_PASSWORD_PATH, setup_params)
        _set_session_cookies(response, result.session)
        response.delete_cookie(CODE_VERIFIER_COOKIE, path="/")
        return response

    if query.get("email"):
        return _redirect(SETUP_PASSWORD_PATH, setup_params)

    return _redirect(LOGIN_PATH)
