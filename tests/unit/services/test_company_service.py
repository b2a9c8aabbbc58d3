"""Unit tests for CompanyService."""

from uuid import UUID

import pytest

from core.exceptions import CompanyNotFoundError, InvalidRoleError
from domain.entities.company import Company, CompanyMember, CompanyRole
from domain.services.company_service import CompanyService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> CompanyService:
    return CompanyService(lambda: uow)


@pytest.fixture
def company(company_id: UUID) -> Company:
    return Company(id=company_id, company="Acme")


class TestGetCompany:
    @pytest.mark.asyncio
    async def test_returns_company_and_members(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company: Company,
        user_id: UUID,
    ) -> None:
        member = CompanyMember(company_id=company.id, user_id=user_id)
        uow.companies.get.return_value = company
        uow.companies.get_members.return_value = [member]

        result, members = await service.get_company(company.id)

        assert result == company
        assert members == [member]

    @pytest.mark.asyncio
    async def test_not_found(
        self, service: CompanyService, uow: FakeUnitOfWork, company_id: UUID
    ) -> None:
        uow.companies.get.return_value = None

        with pytest.raises(CompanyNotFoundError):
            await service.get_company(company_id)


class TestCreateCompany:
    @pytest.mark.asyncio
    async def test_creates_and_commits(
        self, service: CompanyService, uow: FakeUnitOfWork, company: Company
    ) -> None:
        uow.companies.create.return_value = company

        result = await service.create_company(company)

        assert result == company
        assert uow.committed


class TestUpdateCompany:
    @pytest.mark.asyncio
    async def test_only_given_fields_change(
        self, service: CompanyService, uow: FakeUnitOfWork, company: Company
    ) -> None:
        company.email = "old@acme.example"
        uow.companies.get.return_value = company
        uow.companies.update.side_effect = lambda c: c

        result = await service.update_company(company.id, company="Acme Ltd", phone="555")

        assert result.company == "Acme Ltd"
        assert result.phone == "555"
        assert result.email == "old@acme.example"
        uow.companies.update.assert_awaited_once_with(company)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_not_found(
        self, service: CompanyService, uow: FakeUnitOfWork, company_id: UUID
    ) -> None:
        uow.companies.get.return_value = None

        with pytest.raises(CompanyNotFoundError):
            await service.update_company(company_id, company="Acme Ltd")

        uow.companies.update.assert_not_awaited()
        assert not uow.committed


class TestDeleteCompany:
    @pytest.mark.asyncio
    async def test_removes_dependents_then_company(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company: Company,
    ) -> None:
        uow.companies.get.return_value = company
        uow.companies.remove_members_for_company.return_value = 2
        uow.invitations.delete_for_company.return_value = 1

        await service.delete_company(company.id)

        uow.companies.remove_members_for_company.assert_awaited_once_with(company.id)
        uow.invitations.delete_for_company.assert_awaited_once_with(company.id)
        uow.companies.delete.assert_awaited_once_with(company.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_not_found(
        self, service: CompanyService, uow: FakeUnitOfWork, company_id: UUID
    ) -> None:
        uow.companies.get.return_value = None

        with pytest.raises(CompanyNotFoundError):
            await service.delete_company(company_id)

        uow.companies.delete.assert_not_awaited()
        assert not uow.committed


class TestAddUserToCompany:
    @pytest.mark.asyncio
    async def test_new_membership(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company: Company,
        user_id: UUID,
    ) -> None:
        member = CompanyMember(company_id=company.id, user_id=user_id)
        uow.companies.get.return_value = company
        uow.companies.get_member.return_value = None
        uow.companies.upsert_member.return_value = member

        result, created = await service.add_user_to_company(company.id, user_id)

        assert result == member
        assert created is True
        uow.companies.upsert_member.assert_awaited_once_with(
            company.id, user_id, CompanyRole.MEMBER
        )
        assert uow.committed

    @pytest.mark.asyncio
    async def test_existing_membership_is_updated(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company: Company,
        user_id: UUID,
    ) -> None:
        uow.companies.get.return_value = company
        uow.companies.get_member.return_value = CompanyMember(
            company_id=company.id, user_id=user_id
        )
        uow.companies.upsert_member.return_value = CompanyMember(
            company_id=company.id, user_id=user_id, role=CompanyRole.ADMIN
        )

        result, created = await service.add_user_to_company(company.id, user_id, "admin")

        assert created is False
        assert result.role == CompanyRole.ADMIN

    @pytest.mark.asyncio
    async def test_invalid_role(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company_id: UUID,
        user_id: UUID,
    ) -> None:
        with pytest.raises(InvalidRoleError) as exc_info:
            await service.add_user_to_company(company_id, user_id, "owner")

        assert exc_info.value.message == "Invalid role. Must be one of: admin, member, viewer"
        uow.companies.upsert_member.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_company(
        self,
        service: CompanyService,
        uow: FakeUnitOfWork,
        company_id: UUID,
        user_id: UUID,
    ) -> None:
        uow.companies.get.return_value = None

        with pytest.raises(CompanyNotFoundError):
            await service.add_user_to_company(company_id, user_id)
