"""JWT bearer token validation.

Accepts Supabase-issued access tokens signed with an asymmetric key
(ES256 or RS256, public keys fetched from the project's JWKS endpoint) and
HS256 tokens signed with the shared secret (legacy projects and tests).

Supabase access token payload:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "name": "Jane", "client_id": "company-uuid" },
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwk, jwt

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

ASYMMETRIC_ALGORITHMS = ("ES256", "RS256")

# Module-level JWKS cache (kid -> key data), fetched once and reused
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache the provider's JWKS keys."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
    except Exception:
        logger.exception("jwks_fetch_failed", url=jwks_url)
        return {}

    _jwks_cache = {
        key_data["kid"]: key_data for key_data in jwks_data.get("keys", []) if key_data.get("kid")
    }
    logger.info("jwks_fetched", key_count=len(_jwks_cache))
    return _jwks_cache


class JWTAuthProvider:
    """Validates bearer tokens and mints HS256 tokens for tests."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the user it was issued for.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid, expired or missing claims
        """
        try:
            payload = await self._decode(token)
        except JWTError:
            return None

        if payload is None:
            return None
        return self._to_user(payload)

    async def _decode(self, token: str) -> Optional[dict[str, Any]]:
        header = jwt.get_unverified_header(token)
        alg = header.get("alg", self._algorithm)

        if alg in ASYMMETRIC_ALGORITHMS:
            key = await self._public_key(header.get("kid"), alg)
            if key is None:
                return None
            return jwt.decode(token, key, algorithms=[alg], options={"verify_aud": False})

        return jwt.decode(
            token,
            self._secret_key,
            algorithms=[self._algorithm],
            options={"verify_aud": False},
        )

    async def _public_key(self, kid: str | None, alg: str) -> Any:
        """Resolve the signing key for ``kid``, refetching once on a miss."""
        global _jwks_cache
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Key rotation: drop the cache and try once more
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
            if not key_data:
                logger.warning("jwks_key_not_found", kid=kid)
                return None

        return jwk.construct(key_data, algorithm=alg)

    @staticmethod
    def _to_user(payload: dict[str, Any]) -> Optional[TokenUser]:
        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            return None

        try:
            uid = UUID(user_id)
        except ValueError:
            return None

        user_metadata = payload.get("user_metadata") or {}
        display_name = (
            user_metadata.get("display_name")
            or user_metadata.get("name")
            or user_metadata.get("full_name")
            or payload.get("name")
        )
        return TokenUser(
            id=uid,
            email=email.lower(),
            display_name=display_name or None,
            role=payload.get("role"),
        )

    def create_token(self, user: TokenUser, metadata: dict[str, Any] | None = None) -> str:
        """
        Create an HS256 JWT for a user (used for tests and local tooling).

        Args:
            user: The user to create a token for
            metadata: Extra ``user_metadata`` claims (e.g. ``client_id``)

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": expire,
            "user_metadata": {
                "name": user.display_name,
                **(metadata or {}),
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
