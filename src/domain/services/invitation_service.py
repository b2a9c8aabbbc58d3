"""Invitation service layer with business logic."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

import structlog

from core.exceptions import CompanyNotFoundError, InvalidRoleError, ProviderError
from domain.entities.company import COMPANY_ROLES, Company, CompanyRole
from domain.entities.invitation import PendingInvitation
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.session_service import callback_url
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()

DEFAULT_COMPANY_NAME = "New Company"


@dataclass(frozen=True)
class InviteResult:
    """Outcome of an administrator invitation."""

    email: str
    company_id: UUID
    redirect_url: str
    method: str
    invitation_recorded: bool

    @property
    def message(self) -> str:
        return f"Invitation email sent to: {self.email}"


class InvitationService:
    """Service layer for inviting people into companies."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        provider: IIdentityProvider,
    ) -> None:
        self._uow_factory = uow_factory
        self._provider = provider

    async def invite_user(
        self,
        admin_id: UUID,
        email: str,
        name: str = "",
        company_id: UUID | None = None,
        company_name: str | None = None,
        role: str = CompanyRole.MEMBER.value,
    ) -> InviteResult:
        """Invite an email address into a company.

        Without ``company_id`` a new company is created and owned by the
        inviting administrator. Existing identities receive a magic link;
        new ones receive a provider invitation carrying ``client_id`` in
        their metadata.

        Args:
            admin_id: The administrator sending the invitation.
            email: The address to invite.
            name: The invitee's display name.
            company_id: The company to invite into, if it already exists.
            company_name: Name for the company created when none is given.
            role: Company role recorded on the pending invitation.

        Returns:
            InviteResult describing what was sent.

        Raises:
            CompanyNotFoundError: If ``company_id`` does not exist.
            InvalidRoleError: If ``role`` is not a company role.
            ProviderError: If the provider refuses both the invite and the
                magic link fallback.
        """
        if role not in COMPANY_ROLES:
            raise InvalidRoleError(role, COMPANY_ROLES)
        email = email.lower().strip()

        company_id = await self._resolve_company(admin_id, company_id, company_name)
        redirect_url = callback_url(company_id)
        method = await self._send(email, name, company_id, redirect_url)
        recorded = await self._record_invitation(email, name, company_id, CompanyRole(role))

        logger.info(
            "invitation_sent",
            company_id=str(company_id),
            method=method,
            invitation_recorded=recorded,
        )
        return InviteResult(
            email=email,
            company_id=company_id,
            redirect_url=redirect_url,
            method=method,
            invitation_recorded=recorded,
        )

    async def get_company_invitations(self, company_id: UUID) -> list[PendingInvitation]:
        """Get all invitations (claimed or not) for a company."""
        async with self._uow_factory() as uow:
            company = await uow.companies.get(company_id)
            if not company:
                raise CompanyNotFoundError(str(company_id))
            return await uow.invitations.get_for_company(company_id)

    # --- Internal helpers ---

    async def _resolve_company(
        self,
        admin_id: UUID,
        company_id: UUID | None,
        company_name: str | None,
    ) -> UUID:
        async with self._uow_factory() as uow:
            if company_id is not None:
                if not await uow.companies.get(company_id):
                    raise CompanyNotFoundError(str(company_id))
                return company_id

            company = await uow.companies.create(
                Company(company=company_name or DEFAULT_COMPANY_NAME, owner_id=admin_id)
            )
            await uow.commit()
            logger.info("company_created", company_id=str(company.id), owner_id=str(admin_id))
            return company.id

    async def _send(self, email: str, name: str, company_id: UUID, redirect_url: str) -> str:
        """Send the invite email and return how it was sent."""
        existing = await self._provider.find_user_by_email(email)
        if existing is not None:
            await self._provider.generate_magic_link(email, redirect_url)
            return "magic_link"

        try:
            await self._provider.invite_user_by_email(
                email,
                redirect_url,
                data={"name": name, "client_id": str(company_id)},
            )
            return "invite"
        except ProviderError as e:
            logger.warning("invite_failed_falling_back", error=e.message)
            await self._provider.generate_magic_link(email, redirect_url)
            return "magic_link"

    async def _record_invitation(
        self, email: str, name: str, company_id: UUID, role: CompanyRole
    ) -> bool:
        """Store the pending invitation. The email is already out, so failures are logged."""
        try:
            async with self._uow_factory() as uow:
                await uow.invitations.create(
                    PendingInvitation(email=email, company_id=company_id, role=role, name=name)
                )
                await uow.commit()
        except Exception:
            logger.exception("invitation_record_failed", company_id=str(company_id))
            return False
        return True
