"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies.services import get_user_service
from core.exceptions import AuthenticationError, AuthorizationError, ErrorCode
from domain.entities.identity import AuthSession
from domain.entities.user_role import Capabilities
from domain.services.user_service import UserService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

# Session cookies set by the auth callback
ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
CODE_VERIFIER_COOKIE = "sb-code-verifier"

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


def _bearer_or_cookie(
    credentials: HTTPAuthorizationCredentials | None,
    access_cookie: str | None,
) -> str | None:
    if credentials:
        return credentials.credentials
    return access_cookie or None


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
    access_cookie: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
) -> TokenUser:
    """
    Dependency to get the current authenticated user.

    The token is read from the Authorization header, falling back to the
    session cookie.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    token = _bearer_or_cookie(credentials, access_cookie)
    if not token:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    user = await auth_provider.validate_token(token)

    if not user:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return user


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
    access_cookie: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
) -> TokenUser | None:
    """
    Dependency to get the current user if authenticated.

    Returns:
        TokenUser if authenticated, None otherwise (no exception raised)
    """
    token = _bearer_or_cookie(credentials, access_cookie)
    if not token:
        return None

    return await auth_provider.validate_token(token)


async def get_current_session(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    access_cookie: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> AuthSession | None:
    """The session the caller already holds, unvalidated.

    Whether it is still good is for the identity provider to decide.
    """
    token = _bearer_or_cookie(credentials, access_cookie)
    if not token:
        return None
    return AuthSession(access_token=token, refresh_token=refresh_cookie or "")


async def get_capabilities(
    user: Annotated[TokenUser, Depends(get_current_user)],
    service: UserService = Depends(get_user_service),
) -> Capabilities:
    """Resolve the current user's global role and company roles once per request."""
    return await service.resolve_capabilities(user.id, user.email)


async def require_admin(
    capabilities: Annotated[Capabilities, Depends(get_capabilities)],
) -> Capabilities:
    """
    Dependency that only lets global administrators through.

    Raises:
        AuthorizationError: If the current user is not an administrator
    """
    if not capabilities.is_admin:
        raise AuthorizationError("Administrator access required")
    return capabilities


# Type alias for convenience in route handlers
CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
OptionalUser = Annotated[TokenUser | None, Depends(get_optional_user)]
CurrentSession = Annotated[AuthSession | None, Depends(get_current_session)]
CurrentCapabilities = Annotated[Capabilities, Depends(get_capabilities)]
AdminCapabilities = Annotated[Capabilities, Depends(require_admin)]
