"""Integration tests for the SQLAlchemy repositories and tenant linking.

These run against an in-memory SQLite database, so the dialect-specific
``ON CONFLICT`` upserts are exercised for real.
"""

from uuid import UUID, uuid4

import pytest

from domain.entities.company import Company, CompanyRole
from domain.entities.identity import Identity
from domain.entities.invitation import PendingInvitation
from domain.entities.user_role import GlobalRole
from domain.services.company_service import CompanyService
from domain.services.tenant_linker import TenantLinker


async def _create_company(uow_factory, name: str = "Acme") -> Company:
    async with uow_factory() as uow:
        company = await uow.companies.create(Company(company=name))
        await uow.commit()
    return company


async def _invite(uow_factory, company_id: UUID, email: str) -> PendingInvitation:
    async with uow_factory() as uow:
        invitation = await uow.invitations.create(
            PendingInvitation(email=email, company_id=company_id)
        )
        await uow.commit()
    return invitation


class TestTenantLinking:
    @pytest.mark.asyncio
    async def test_linking_twice_leaves_one_membership(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        identity = Identity(id=uuid4(), email="new@example.com")
        await _invite(uow_factory, company.id, "New@Example.com")
        linker = TenantLinker(uow_factory)

        first = await linker.link_tenant(identity, company.id)
        second = await linker.link_tenant(identity, company.id)

        assert first.complete and second.complete
        assert first.role_created is True
        assert second.role_created is False
        assert first.invitations_claimed == 1
        assert second.invitations_claimed == 0

        async with uow_factory() as uow:
            members = await uow.companies.get_members(company.id)
            role = await uow.user_roles.get(identity.id)
            invitations = await uow.invitations.get_for_company(company.id)

        assert [(m.user_id, m.role) for m in members] == [(identity.id, CompanyRole.MEMBER)]
        assert role is not None and role.role == GlobalRole.USER
        assert invitations[0].claimed_by == identity.id

    @pytest.mark.asyncio
    async def test_claimed_invitation_is_not_reclaimed(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        await _invite(uow_factory, company.id, "shared@example.com")
        first_user, second_user = uuid4(), uuid4()

        async with uow_factory() as uow:
            assert await uow.invitations.claim_unclaimed(
                company.id, "shared@example.com", first_user
            ) == 1
            await uow.commit()
        async with uow_factory() as uow:
            assert await uow.invitations.claim_unclaimed(
                company.id, "shared@example.com", second_user
            ) == 0
            await uow.commit()

        async with uow_factory() as uow:
            (invitation,) = await uow.invitations.get_for_company_email(
                company.id, "SHARED@example.com"
            )

        assert invitation.is_claimed
        assert invitation.claimed_by == first_user

    @pytest.mark.asyncio
    async def test_linking_never_downgrades_an_admin(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        identity = Identity(id=uuid4(), email="boss@example.com")
        async with uow_factory() as uow:
            await uow.user_roles.set(identity.id, GlobalRole.ADMIN)
            await uow.commit()

        report = await TenantLinker(uow_factory).link_tenant(identity, company.id)

        assert report.role_created is False
        async with uow_factory() as uow:
            role = await uow.user_roles.get(identity.id)
        assert role is not None and role.role == GlobalRole.ADMIN


class TestCompanyRepository:
    @pytest.mark.asyncio
    async def test_upsert_member_updates_role(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        user_id = uuid4()

        async with uow_factory() as uow:
            await uow.companies.upsert_member(company.id, user_id, CompanyRole.MEMBER)
            updated = await uow.companies.upsert_member(company.id, user_id, CompanyRole.ADMIN)
            await uow.commit()

        assert updated.role == CompanyRole.ADMIN
        async with uow_factory() as uow:
            assert len(await uow.companies.get_members(company.id)) == 1

    @pytest.mark.asyncio
    async def test_companies_for_user(self, uow_factory) -> None:
        acme = await _create_company(uow_factory, "Acme")
        globex = await _create_company(uow_factory, "Globex")
        await _create_company(uow_factory, "Initech")
        user_id = uuid4()

        async with uow_factory() as uow:
            await uow.companies.upsert_member(globex.id, user_id, CompanyRole.VIEWER)
            await uow.companies.upsert_member(acme.id, user_id, CompanyRole.MEMBER)
            await uow.commit()

        async with uow_factory() as uow:
            companies = await uow.companies.get_all_for_user(user_id)
            everything = await uow.companies.list_all()

        assert [c.company for c in companies] == ["Acme", "Globex"]
        assert [c.company for c in everything] == ["Acme", "Globex", "Initech"]

    @pytest.mark.asyncio
    async def test_delete_company_removes_dependents(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        other = await _create_company(uow_factory, "Other")
        user_id = uuid4()
        async with uow_factory() as uow:
            await uow.companies.upsert_member(company.id, user_id, CompanyRole.MEMBER)
            await uow.companies.upsert_member(other.id, user_id, CompanyRole.MEMBER)
            await uow.commit()
        await _invite(uow_factory, company.id, "a@example.com")

        await CompanyService(uow_factory).delete_company(company.id)

        async with uow_factory() as uow:
            assert await uow.companies.get(company.id) is None
            assert await uow.companies.get_members(company.id) == []
            assert await uow.invitations.get_for_company(company.id) == []
            remaining = await uow.companies.get_memberships_for_user(user_id)
        assert [m.company_id for m in remaining] == [other.id]

    @pytest.mark.asyncio
    async def test_update_company(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        company.company = "Acme Ltd"
        company.email = "hello@acme.example"

        async with uow_factory() as uow:
            await uow.companies.update(company)
            await uow.commit()

        async with uow_factory() as uow:
            stored = await uow.companies.get(company.id)
        assert stored is not None
        assert stored.company == "Acme Ltd"
        assert stored.email == "hello@acme.example"

    @pytest.mark.asyncio
    async def test_remove_members_for_user(self, uow_factory) -> None:
        company = await _create_company(uow_factory)
        user_id = uuid4()
        async with uow_factory() as uow:
            await uow.companies.upsert_member(company.id, user_id, CompanyRole.MEMBER)
            await uow.commit()

        async with uow_factory() as uow:
            removed = await uow.companies.remove_members_for_user(user_id)
            await uow.commit()

        assert removed == 1
        async with uow_factory() as uow:
            assert await uow.companies.get_memberships_for_user(user_id) == []


class TestUserRoleRepository:
    @pytest.mark.asyncio
    async def test_ensure_only_inserts_once(self, uow_factory) -> None:
        user_id = uuid4()

        async with uow_factory() as uow:
            assert await uow.user_roles.ensure(user_id, GlobalRole.USER) is True
            assert await uow.user_roles.ensure(user_id, GlobalRole.ADMIN) is False
            await uow.commit()

        async with uow_factory() as uow:
            rows = await uow.user_roles.list_all()
        assert [(r.user_id, r.role) for r in rows] == [(user_id, GlobalRole.USER)]

    @pytest.mark.asyncio
    async def test_set_overwrites_and_delete_removes(self, uow_factory) -> None:
        user_id = uuid4()

        async with uow_factory() as uow:
            await uow.user_roles.set(user_id, GlobalRole.USER)
            promoted = await uow.user_roles.set(user_id, GlobalRole.ADMIN)
            await uow.commit()

        assert promoted.role == GlobalRole.ADMIN

        async with uow_factory() as uow:
            assert await uow.user_roles.delete(user_id) is True
            await uow.commit()
        async with uow_factory() as uow:
            assert await uow.user_roles.get(user_id) is None
