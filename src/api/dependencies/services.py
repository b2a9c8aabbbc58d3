"""Service factories shared by the API routers and auth dependencies."""

from functools import lru_cache
from typing import Callable

from domain.services.company_service import CompanyService
from domain.services.credential_service import CredentialService
from domain.services.invitation_service import InvitationService
from domain.services.onboarding_flow import OnboardingFlow
from domain.services.session_service import SessionService
from domain.services.tenant_linker import TenantLinker
from domain.services.user_service import UserService
from infrastructure.auth.supabase_client import SupabaseAuthClient
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_identity_provider() -> SupabaseAuthClient:
    """Get the identity provider client."""
    return SupabaseAuthClient()


@lru_cache
def get_session_service() -> SessionService:
    """Get Session service instance."""
    return SessionService(get_identity_provider())


@lru_cache
def get_credential_service() -> CredentialService:
    """Get Credential service instance."""
    return CredentialService(get_identity_provider())


@lru_cache
def get_tenant_linker() -> TenantLinker:
    """Get Tenant linker instance."""
    return TenantLinker(get_uow_factory())


def get_onboarding_flow() -> OnboardingFlow:
    """Create a flow for one request. Flows hold per-request state and are not cached."""
    return OnboardingFlow(
        sessions=get_session_service(),
        credentials=get_credential_service(),
        linker=get_tenant_linker(),
        uow_factory=get_uow_factory(),
    )


@lru_cache
def get_company_service() -> CompanyService:
    """Get Company service instance."""
    return CompanyService(get_uow_factory())


@lru_cache
def get_invitation_service() -> InvitationService:
    """Get Invitation service instance."""
    return InvitationService(get_uow_factory(), get_identity_provider())


@lru_cache
def get_user_service() -> UserService:
    """Get User service instance."""
    return UserService(get_uow_factory(), get_identity_provider())
