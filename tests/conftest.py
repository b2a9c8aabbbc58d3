"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.exceptions import ProviderError
from domain.entities.identity import AuthSession, Identity, LinkResult
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_JWT_SECRET = "test-secret-key"


class FakeIdentityProvider:
    """In-memory stand-in for the hosted identity provider.

    Register identities and credentials with the ``add_*`` helpers; every
    call is recorded in ``calls``. Put a ProviderError in ``failures``
    under an operation name to make that operation fail.
    """

    def __init__(self) -> None:
        self.users: dict[UUID, Identity] = {}
        self.sessions: dict[str, Identity] = {}
        self.refresh_tokens: dict[str, Identity] = {}
        self.codes: dict[str, Identity] = {}
        self.one_time_tokens: dict[tuple[str, str], Identity] = {}
        self.passwords: dict[UUID, str] = {}
        self.failures: dict[str, ProviderError] = {}
        self.calls: list[tuple[str, Any]] = []

    # --- Test helpers ---

    def add_user(
        self,
        email: str,
        metadata: dict[str, Any] | None = None,
        user_id: UUID | None = None,
    ) -> Identity:
        identity = Identity(id=user_id or uuid4(), email=email.lower(), metadata=metadata or {})
        self.users[identity.id] = identity
        return identity

    def add_session(self, identity: Identity, access_token: str | None = None) -> AuthSession:
        session = AuthSession(
            access_token=access_token or f"access-{uuid4().hex}",
            refresh_token=f"refresh-{uuid4().hex}",
        )
        self.sessions[session.access_token] = identity
        self.refresh_tokens[session.refresh_token] = identity
        return session

    def add_code(self, code: str, identity: Identity) -> None:
        self.codes[code] = identity

    def add_one_time_token(self, token: str, token_type: str, identity: Identity) -> None:
        self.one_time_tokens[(token, token_type)] = identity

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failures:
            raise self.failures[operation]

    def called(self, operation: str) -> list[Any]:
        return [args for name, args in self.calls if name == operation]

    # --- IIdentityProvider ---

    async def get_user(self, access_token: str) -> Identity | None:
        self._record("get_user", access_token)
        return self.sessions.get(access_token)

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None = None
    ) -> tuple[AuthSession, Identity]:
        self._record("exchange_code", code, code_verifier)
        identity = self.codes.pop(code, None)
        if identity is None:
            raise ProviderError("invalid flow state, no valid flow state found", 400, "exchange_code")
        return self.add_session(identity), identity

    async def verify_one_time_token(
        self, token_hash: str, token_type: str
    ) -> tuple[AuthSession, Identity]:
        self._record("verify_one_time_token", token_hash, token_type)
        identity = self.one_time_tokens.pop((token_hash, token_type), None)
        if identity is None:
            raise ProviderError(
                "Email link is invalid or has expired", 403, "verify_one_time_token"
            )
        return self.add_session(identity), identity

    async def set_session_from_token_pair(
        self, access_token: str, refresh_token: str | None
    ) -> tuple[AuthSession, Identity]:
        self._record("set_session", access_token, refresh_token)
        identity = self.sessions.get(access_token)
        if identity is not None:
            return AuthSession(access_token=access_token, refresh_token=refresh_token or ""), identity
        if refresh_token and refresh_token in self.refresh_tokens:
            identity = self.refresh_tokens.pop(refresh_token)
            return self.add_session(identity), identity
        raise ProviderError("Invalid Refresh Token: Refresh Token Not Found", 400, "set_session")

    async def update_password(self, access_token: str, password: str) -> Identity:
        self._record("update_password", access_token)
        identity = self.sessions.get(access_token)
        if identity is None:
            raise ProviderError("Auth session missing!", 401, "update_password")
        self.passwords[identity.id] = password
        return identity

    async def send_one_time_link(self, email: str, redirect_to: str) -> LinkResult:
        self._record("send_one_time_link", email, redirect_to)
        if not any(u.email == email for u in self.users.values()):
            raise ProviderError("Signups not allowed for otp", 422, "send_one_time_link")
        return LinkResult(email=email, sent=True, redirect_to=redirect_to)

    async def invite_user_by_email(
        self, email: str, redirect_to: str, data: dict[str, Any] | None = None
    ) -> Identity:
        self._record("invite_user", email, redirect_to, data)
        return self.add_user(email, metadata=dict(data or {}))

    async def generate_magic_link(self, email: str, redirect_to: str) -> LinkResult:
        self._record("generate_magic_link", email, redirect_to)
        return LinkResult(email=email, sent=True, redirect_to=redirect_to)

    async def list_users(self) -> list[Identity]:
        self._record("list_users")
        return list(self.users.values())

    async def find_user_by_email(self, email: str) -> Identity | None:
        self._record("find_user_by_email", email)
        wanted = email.lower().strip()
        return next((u for u in self.users.values() if u.email == wanted), None)

    async def delete_user(self, user_id: UUID) -> None:
        self._record("delete_user", user_id)
        if self.users.pop(user_id, None) is None:
            raise ProviderError("User not found", 404, "delete_user")


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    """Create an empty fake identity provider."""
    return FakeIdentityProvider()


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user."""
    return TokenUser(
        id=uuid4(),
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key=TEST_JWT_SECRET,
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth, no overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app_client(
    uow_factory,
    identity_provider: FakeIdentityProvider,
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the test database and fake provider.

    Authentication is real: send ``auth_headers`` (or any token minted
    by ``auth_provider``) to act as a user.
    """
    from api.dependencies.auth import get_auth_provider
    from api.dependencies.services import (
        get_company_service,
        get_invitation_service,
        get_onboarding_flow,
        get_session_service,
        get_user_service,
    )
    from domain.services.company_service import CompanyService
    from domain.services.credential_service import CredentialService
    from domain.services.invitation_service import InvitationService
    from domain.services.onboarding_flow import OnboardingFlow
    from domain.services.session_service import SessionService
    from domain.services.tenant_linker import TenantLinker
    from domain.services.user_service import UserService
    from main import create_app

    app = create_app()

    session_service = SessionService(identity_provider)

    def override_get_onboarding_flow() -> OnboardingFlow:
        return OnboardingFlow(
            sessions=session_service,
            credentials=CredentialService(identity_provider, min_length=8),
            linker=TenantLinker(uow_factory),
            uow_factory=uow_factory,
        )

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_session_service] = lambda: session_service
    app.dependency_overrides[get_onboarding_flow] = override_get_onboarding_flow
    app.dependency_overrides[get_company_service] = lambda: CompanyService(uow_factory)
    app.dependency_overrides[get_invitation_service] = lambda: InvitationService(
        uow_factory, identity_provider
    )
    app.dependency_overrides[get_user_service] = lambda: UserService(
        uow_factory, identity_provider
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
