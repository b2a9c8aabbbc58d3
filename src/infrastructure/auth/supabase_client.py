"""Supabase Auth (GoTrue) REST client.

Implements ``IIdentityProvider`` over the provider's HTTP API. Calls made
on behalf of a user carry that user's access token; admin calls carry the
service role key and must only be reached from admin-guarded routes.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

import httpx
import structlog

from core.config import settings
from core.exceptions import ProviderError
from domain.entities.identity import AuthSession, Identity, LinkResult

logger = structlog.get_logger()

_ADMIN_PAGE_SIZE = 200


def _parse_datetime(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    """Pull the human readable message out of a provider error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


def _json_body(response: httpx.Response, operation: str) -> Any:
    try:
        return response.json()
    except ValueError:
        raise ProviderError(
            "Identity provider returned an unreadable response",
            provider_status=response.status_code,
            operation=operation,
        ) from None


def identity_from_payload(data: Any, operation: str | None = None) -> Identity:
    """Build an Identity from a provider user object.

    Raises:
        ProviderError: If the object has no usable user id
    """
    if not isinstance(data, dict):
        raise ProviderError("Identity provider returned no user", operation=operation)
    try:
        user_id = UUID(str(data["id"]))
    except (KeyError, ValueError):
        raise ProviderError("Identity provider returned no user", operation=operation) from None
    metadata = data.get("user_metadata") or {}
    display_name = (
        metadata.get("display_name")
        or metadata.get("name")
        or metadata.get("full_name")
        or None
    )
    return Identity(
        id=user_id,
        email=(data.get("email") or "").lower(),
        display_name=display_name,
        metadata=dict(metadata),
        email_confirmed_at=_parse_datetime(data.get("email_confirmed_at")),
        created_at=_parse_datetime(data.get("created_at")),
        last_sign_in_at=_parse_datetime(data.get("last_sign_in_at")),
    )


def session_from_payload(data: Any) -> tuple[AuthSession, Identity]:
    """Build a session and its identity from a provider token response."""
    if not isinstance(data, dict):
        raise ProviderError("Identity provider returned no session")
    access_token = data.get("access_token")
    user = data.get("user")
    if not access_token or not isinstance(user, dict):
        raise ProviderError("Identity provider returned no session")
    session = AuthSession(
        access_token=access_token,
        refresh_token=data.get("refresh_token") or "",
        expires_at=data.get("expires_at"),
        token_type=data.get("token_type") or "bearer",
    )
    return session, identity_from_payload(user)


class SupabaseAuthClient:
    """Async client for the Supabase Auth REST API."""

    def __init__(
        self,
        base_url: str = settings.supabase_auth_url,
        anon_key: str = settings.supabase_anon_key,
        service_role_key: str = settings.supabase_service_role_key,
        timeout: float = settings.supabase_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self._timeout = timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        bearer: str | None = None,
        admin: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request to the provider and return the raw response."""
        if not self._base_url:
            raise ProviderError("Identity provider is not configured", operation=operation)

        if admin:
            if not self._service_role_key:
                raise ProviderError(
                    "Service role key is not configured", operation=operation
                )
            api_key = self._service_role_key
            bearer = self._service_role_key
        else:
            api_key = self._anon_key

        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {bearer or api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                return await client.request(
                    method, f"{self._base_url}{path}", headers=headers, **kwargs
                )
        except httpx.HTTPError as e:
            logger.warning("provider_unreachable", operation=operation, error=str(e))
            raise ProviderError(
                f"Identity provider unreachable: {e}", operation=operation
            ) from e

    async def _call(
        self, method: str, path: str, operation: str, **kwargs: Any
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ProviderError: On any non-2xx response
        """
        response = await self._request(method, path, operation, **kwargs)
        if response.is_error:
            message = _error_message(response)
            logger.info(
                "provider_request_rejected",
                operation=operation,
                status_code=response.status_code,
                message=message,
            )
            raise ProviderError(
                message, provider_status=response.status_code, operation=operation
            )
        if not response.content:
            return {}
        return _json_body(response, operation)

    # --- Session operations ---

    async def get_user(self, access_token: str) -> Identity | None:
        """Return the identity for an access token, or None if it is not valid."""
        response = await self._request("GET", "/user", "get_user", bearer=access_token)
        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise ProviderError(
                _error_message(response),
                provider_status=response.status_code,
                operation="get_user",
            )
        return identity_from_payload(_json_body(response, "get_user"), "get_user")

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None = None
    ) -> tuple[AuthSession, Identity]:
        body: dict[str, Any] = {"auth_code": code}
        if code_verifier:
            body["code_verifier"] = code_verifier
        data = await self._call(
            "POST",
            "/token",
            "exchange_code",
            params={"grant_type": "pkce"},
            json=body,
        )
        return session_from_payload(data)

    async def verify_one_time_token(
        self, token_hash: str, token_type: str
    ) -> tuple[AuthSession, Identity]:
        data = await self._call(
            "POST",
            "/verify",
            "verify_one_time_token",
            json={"type": token_type, "token_hash": token_hash},
        )
        return session_from_payload(data)

    async def refresh_session(self, refresh_token: str) -> tuple[AuthSession, Identity]:
        data = await self._call(
            "POST",
            "/token",
            "refresh_session",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return session_from_payload(data)

    async def set_session_from_token_pair(
        self, access_token: str, refresh_token: str | None
    ) -> tuple[AuthSession, Identity]:
        """Adopt a token pair, refreshing it if the access token was rejected."""
        identity = await self.get_user(access_token)
        if identity is not None:
            return AuthSession(access_token=access_token, refresh_token=refresh_token or ""), identity

        if not refresh_token:
            raise ProviderError(
                "Access token is invalid or expired", provider_status=401, operation="set_session"
            )
        return await self.refresh_session(refresh_token)

    async def update_password(self, access_token: str, password: str) -> Identity:
        data = await self._call(
            "PUT",
            "/user",
            "update_password",
            bearer=access_token,
            json={"password": password},
        )
        return identity_from_payload(data, "update_password")

    async def send_one_time_link(self, email: str, redirect_to: str) -> LinkResult:
        await self._call(
            "POST",
            "/otp",
            "send_one_time_link",
            params={"redirect_to": redirect_to},
            json={"email": email, "create_user": False},
        )
        return LinkResult(email=email, sent=True, redirect_to=redirect_to)

    # --- Admin operations (service role) ---

    async def invite_user_by_email(
        self, email: str, redirect_to: str, data: dict[str, Any] | None = None
    ) -> Identity:
        payload = await self._call(
            "POST",
            "/invite",
            "invite_user",
            admin=True,
            params={"redirect_to": redirect_to},
            json={"email": email, "data": data or {}},
        )
        return identity_from_payload(payload, "invite_user")

    async def generate_magic_link(self, email: str, redirect_to: str) -> LinkResult:
        await self._call(
            "POST",
            "/admin/generate_link",
            "generate_magic_link",
            admin=True,
            params={"redirect_to": redirect_to},
            json={"type": "magiclink", "email": email},
        )
        return LinkResult(email=email, sent=True, redirect_to=redirect_to)

    async def list_users(self) -> list[Identity]:
        users: list[Identity] = []
        page = 1
        while True:
            data = await self._call(
                "GET",
                "/admin/users",
                "list_users",
                admin=True,
                params={"page": page, "per_page": _ADMIN_PAGE_SIZE},
            )
            batch = data.get("users", []) if isinstance(data, dict) else []
            users.extend(identity_from_payload(item, "list_users") for item in batch)
            if len(batch) < _ADMIN_PAGE_SIZE:
                return users
            page += 1

    async def find_user_by_email(self, email: str) -> Identity | None:
        wanted = email.lower().strip()
        for identity in await self.list_users():
            if identity.email == wanted:
                return identity
        return None

    async def delete_user(self, user_id: UUID) -> None:
        await self._call("DELETE", f"/admin/users/{user_id}", "delete_user", admin=True)
