"""Turn inbound link parameters into a canonical LinkIntent.

Links arrive in several shapes:

- ``/auth/callback?code=...&client_id=...`` (PKCE sign-in)
- ``/auth/callback?token=...&type=recovery&email=...`` (one-time token)
- ``/auth/callback?invite_token=...&client_id=...`` (invitation)
- ``/login#access_token=...&refresh_token=...&type=invite`` (legacy invite)

Parsing is pure and never raises: anything unreadable is left out of the
intent.
"""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlsplit
from uuid import UUID

import structlog

from domain.entities.link_intent import LinkIntent

logger = structlog.get_logger()

# Query names carrying a one-time token, in order of preference
_ONE_TIME_TOKEN_KEYS = ("token", "invite_token", "token_hash")


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first(params: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = _clean(params.get(key))
        if value:
            return value
    return None


def _parse_fragment(fragment: str | None) -> dict[str, str]:
    if not fragment:
        return {}
    return dict(parse_qsl(fragment.lstrip("#"), keep_blank_values=False))


def _as_uuid(value: Any) -> UUID | None:
    text = _clean(value)
    if not text:
        return None
    try:
        return UUID(text)
    except ValueError:
        return None


def decode_jwt_payload(token: str) -> dict[str, Any] | None:
    """Decode the payload segment of a JWT-shaped string WITHOUT verifying it.

    Returns None unless the token has exactly three segments and the middle
    one is base64url-encoded JSON describing an object.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment))
    except (binascii.Error, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


def tenant_from_access_token(access_token: str | None) -> UUID | None:
    """Extract ``user_metadata.client_id`` from an access token, if readable."""
    if not access_token:
        return None
    payload = decode_jwt_payload(access_token)
    if payload is None:
        return None
    metadata = payload.get("user_metadata")
    if not isinstance(metadata, dict):
        return None
    return _as_uuid(metadata.get("client_id"))


def parse_link(
    query: Mapping[str, Any] | None = None,
    fragment: str | None = None,
) -> LinkIntent:
    """Build a LinkIntent from query parameters and/or a URL fragment.

    Token fields prefer the fragment; ``client_id`` and ``email`` prefer
    the query. When no ``client_id`` parameter is present, the tenant is
    read from the (unverified) access token payload.
    """
    query = query or {}
    hash_params = _parse_fragment(fragment)

    access_token = _first(hash_params, "access_token") or _first(query, "access_token")
    refresh_token = _first(hash_params, "refresh_token") or _first(query, "refresh_token")
    one_time_token = _first(hash_params, *_ONE_TIME_TOKEN_KEYS) or _first(
        query, *_ONE_TIME_TOKEN_KEYS
    )
    token_type = _first(hash_params, "type") or _first(query, "type")
    if token_type:
        token_type = token_type.lower()
    if not token_type and _first(query, "invite_token"):
        token_type = "invite"

    email = _first(query, "email") or _first(hash_params, "email")
    if email:
        email = email.lower()

    tenant_id = (
        _as_uuid(query.get("client_id"))
        or _as_uuid(hash_params.get("client_id"))
        or tenant_from_access_token(access_token)
    )

    intent = LinkIntent(
        access_token=access_token,
        refresh_token=refresh_token,
        one_time_token=one_time_token,
        token_type=token_type,
        email=email,
        tenant_id=tenant_id,
        auth_code=_first(query, "code"),
        from_invite=_first(query, "from") == "invite" or token_type == "invite",
    )
    logger.debug("link_parsed", intent=repr(intent))
    return intent


def parse_url(url: str) -> LinkIntent:
    """Parse a full URL, using both its query string and its fragment."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return LinkIntent()
    return parse_link(dict(parse_qsl(parts.query)), parts.fragment)
