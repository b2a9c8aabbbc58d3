"""Unit tests for TenantLinker."""

from uuid import UUID

import pytest

from domain.entities.company import CompanyMember, CompanyRole
from domain.entities.identity import Identity
from domain.entities.user_role import GlobalRole
from domain.services.tenant_linker import TenantLinker
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def linker(uow: FakeUnitOfWork) -> TenantLinker:
    return TenantLinker(lambda: uow)


@pytest.fixture
def identity(user_id: UUID) -> Identity:
    return Identity(id=user_id, email="new@example.com")


class TestLinkTenant:
    @pytest.mark.asyncio
    async def test_runs_all_three_writes(
        self,
        linker: TenantLinker,
        uow: FakeUnitOfWork,
        identity: Identity,
        company_id: UUID,
    ) -> None:
        uow.companies.upsert_member.return_value = CompanyMember(
            company_id=company_id, user_id=identity.id
        )
        uow.user_roles.ensure.return_value = True
        uow.invitations.claim_unclaimed.return_value = 1

        report = await linker.link_tenant(identity, company_id)

        uow.companies.upsert_member.assert_awaited_once_with(
            company_id, identity.id, CompanyRole.MEMBER
        )
        uow.user_roles.ensure.assert_awaited_once_with(identity.id, GlobalRole.USER)
        uow.invitations.claim_unclaimed.assert_awaited_once_with(
            company_id, "new@example.com", identity.id
        )
        assert report.complete
        assert report.membership
        assert report.role_created
        assert report.invitations_claimed == 1
        # Each write runs in its own unit of work
        assert uow.entered == 3

    @pytest.mark.asyncio
    async def test_failures_are_swallowed_and_other_steps_still_run(
        self,
        linker: TenantLinker,
        uow: FakeUnitOfWork,
        identity: Identity,
        company_id: UUID,
    ) -> None:
        uow.companies.upsert_member.side_effect = RuntimeError("connection reset")
        uow.user_roles.ensure.return_value = False
        uow.invitations.claim_unclaimed.side_effect = RuntimeError("deadlock")

        report = await linker.link_tenant(identity, company_id)

        assert report.failed_steps == ["membership", "claim_invitation"]
        assert not report.complete
        assert not report.membership
        uow.user_roles.ensure.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_role_is_not_reported_as_created(
        self,
        linker: TenantLinker,
        uow: FakeUnitOfWork,
        identity: Identity,
        company_id: UUID,
    ) -> None:
        uow.user_roles.ensure.return_value = False
        uow.invitations.claim_unclaimed.return_value = 0

        report = await linker.link_tenant(identity, company_id)

        assert report.complete
        assert not report.role_created
        assert report.invitations_claimed == 0
