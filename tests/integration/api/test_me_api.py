"""Integration tests for the current user API."""

import pytest
from httpx import AsyncClient

from domain.entities.company import Company, CompanyRole
from infrastructure.auth.provider import TokenUser


class TestMe:
    @pytest.mark.asyncio
    async def test_new_user_is_plain_user(
        self, app_client: AsyncClient, auth_headers: dict, test_user: TokenUser
    ) -> None:
        response = await app_client.get("/api/v1/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "user_id": str(test_user.id),
            "email": test_user.email,
            "role": "user",
            "is_admin": False,
            "companies": [],
        }

    @pytest.mark.asyncio
    async def test_requires_authentication(self, app_client: AsyncClient) -> None:
        response = await app_client.get("/api/v1/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_memberships_are_listed(
        self,
        app_client: AsyncClient,
        auth_headers: dict,
        test_user: TokenUser,
        uow_factory,
    ) -> None:
        async with uow_factory() as uow:
            acme = await uow.companies.create(Company(company="Acme"))
            await uow.companies.create(Company(company="Other"))
            await uow.companies.upsert_member(acme.id, test_user.id, CompanyRole.ADMIN)
            await uow.commit()

        me = await app_client.get("/api/v1/me", headers=auth_headers)
        mine = await app_client.get("/api/v1/companies/mine", headers=auth_headers)

        assert me.json()["companies"] == [{"client_id": str(acme.id), "role": "admin"}]
        assert [c["company"] for c in mine.json()["data"]] == ["Acme"]
        assert mine.json()["meta"]["total"] == 1
