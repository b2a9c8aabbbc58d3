"""Associate a newly onboarded identity with its company."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from domain.entities.company import CompanyRole
from domain.entities.identity import Identity
from domain.entities.user_role import GlobalRole
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


@dataclass
class LinkReport:
    """Which linking steps completed. Failed steps are listed by name."""

    membership: bool = False
    role_created: bool = False
    invitations_claimed: int = 0
    failed_steps: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_steps


class TenantLinker:
    """Runs the three idempotent linking writes.

    Each write uses its own unit of work so that one failing does not
    roll back the others. Failures are logged and never raised: the
    account is already usable and an administrator can repair a missed
    link.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def link_tenant(self, identity: Identity, tenant_id: UUID) -> LinkReport:
        report = LinkReport()

        async def upsert_membership(uow: IUnitOfWork) -> None:
            await uow.companies.upsert_member(tenant_id, identity.id, CompanyRole.MEMBER)
            report.membership = True

        async def ensure_role(uow: IUnitOfWork) -> None:
            report.role_created = await uow.user_roles.ensure(identity.id, GlobalRole.USER)

        async def claim_invitations(uow: IUnitOfWork) -> None:
            report.invitations_claimed = await uow.invitations.claim_unclaimed(
                tenant_id, identity.email, identity.id
            )

        await self._run_step("membership", upsert_membership, report, tenant_id, identity)
        await self._run_step("global_role", ensure_role, report, tenant_id, identity)
        await self._run_step("claim_invitation", claim_invitations, report, tenant_id, identity)

        logger.info(
            "tenant_linked",
            tenant_id=str(tenant_id),
            user_id=str(identity.id),
            role_created=report.role_created,
            invitations_claimed=report.invitations_claimed,
            failed_steps=report.failed_steps,
        )
        return report

    async def _run_step(
        self,
        name: str,
        step: Callable[[IUnitOfWork], Awaitable[None]],
        report: LinkReport,
        tenant_id: UUID,
        identity: Identity,
    ) -> None:
        try:
            async with self._uow_factory() as uow:
                await step(uow)
                await uow.commit()
        except Exception:
            report.failed_steps.append(name)
            logger.exception(
                "tenant_link_step_failed",
                step=name,
                tenant_id=str(tenant_id),
                user_id=str(identity.id),
            )
