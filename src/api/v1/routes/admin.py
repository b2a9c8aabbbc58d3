"""Administration API routes. Every route requires the global admin role."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import AdminCapabilities
from api.dependencies.services import get_company_service, get_invitation_service, get_user_service
from api.v1.schemas.admin import (
    AddCompanyMemberRequest,
    AddCompanyMemberResponse,
    AdminUserListResponse,
    AdminUserResponse,
    InviteUserRequest,
    InviteUserResponse,
    PendingInvitationListResponse,
    PendingInvitationResponse,
    SetUserRoleRequest,
    UserRoleResponse,
)
from api.v1.schemas.company import (
    CompanyDetailResponse,
    CompanyListResponse,
    CompanyMemberResponse,
    CompanyResponse,
    CreateCompanyRequest,
    UpdateCompanyRequest,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.company import Company
from domain.entities.user_role import GlobalRole
from domain.services.company_service import CompanyService
from domain.services.invitation_service import InvitationService
from domain.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin"])


# --- Invitations & memberships ---


@router.post(
    "/invitations",
    response_model=InviteUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user into a company",
    responses={
        201: {"description": "Invitation email sent"},
        403: {"description": "Administrator access required"},
        404: {"description": "Company not found"},
        502: {"description": "Identity provider error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def invite_user(
    request: Request,
    body: InviteUserRequest,
    admin: AdminCapabilities,
    service: InvitationService = Depends(get_invitation_service),
) -> InviteUserResponse:
    """Invite an email into a company, creating the company when no ``client_id`` is given."""
    result = await service.invite_user(
        admin_id=admin.user_id,
        email=body.email,
        name=body.name,
        company_id=body.client_id,
        company_name=body.company,
        role=body.role,
    )
    return InviteUserResponse(
        message=result.message,
        client_id=result.company_id,
        redirect_url=result.redirect_url,
    )


@router.post(
    "/company-members",
    response_model=AddCompanyMemberResponse,
    summary="Add a user to a company or change their role",
    responses={
        200: {"description": "Membership created or updated"},
        400: {"description": "Invalid role"},
        403: {"description": "Administrator access required"},
        404: {"description": "Company not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def add_company_member(
    request: Request,
    body: AddCompanyMemberRequest,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> AddCompanyMemberResponse:
    """Add a user to a company. An existing membership has its role updated."""
    member, created = await service.add_user_to_company(body.client_id, body.user_id, body.role)
    message = "User added to company successfully" if created else "User role updated successfully"
    return AddCompanyMemberResponse(
        message=message,
        client_id=member.company_id,
        user_id=member.user_id,
        role=member.role.value,
    )


# --- Users ---


@router.get(
    "/users",
    response_model=AdminUserListResponse,
    summary="List users",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_users(
    request: Request,
    admin: AdminCapabilities,
    service: UserService = Depends(get_user_service),
) -> AdminUserListResponse:
    """List every user with their global role and companies."""
    summaries = await service.list_users()
    data = [AdminUserResponse.from_summary(s) for s in summaries]
    return AdminUserListResponse(data=data, meta={"total": len(data)})


@router.put(
    "/users/{user_id}/role",
    response_model=UserRoleResponse,
    summary="Set a user's global role",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_user_role(
    request: Request,
    user_id: UUID,
    body: SetUserRoleRequest,
    admin: AdminCapabilities,
    service: UserService = Depends(get_user_service),
) -> UserRoleResponse:
    """Grant or revoke the global admin role."""
    updated = await service.set_role(user_id, GlobalRole(body.role))
    return UserRoleResponse(user_id=updated.user_id, role=updated.role.value)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses={
        204: {"description": "User deleted"},
        400: {"description": "Cannot delete your own account"},
        403: {"description": "Administrator access required"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_user(
    request: Request,
    user_id: UUID,
    admin: AdminCapabilities,
    service: UserService = Depends(get_user_service),
) -> None:
    """Delete a user's memberships, global role and identity."""
    await service.delete_user(admin.user_id, user_id)
    return None


# --- Companies ---


@router.get(
    "/companies",
    response_model=CompanyListResponse,
    summary="List companies",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_companies(
    request: Request,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> CompanyListResponse:
    """List every company."""
    companies = await service.list_companies()
    data = [CompanyResponse.from_entity(c) for c in companies]
    return CompanyListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/companies",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_company(
    request: Request,
    body: CreateCompanyRequest,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> CompanyResponse:
    """Create a company owned by the current administrator."""
    company = await service.create_company(
        Company(
            company=body.company,
            name=body.name,
            phone=body.phone,
            email=body.email,
            description=body.description,
            owner_id=admin.user_id,
        )
    )
    return CompanyResponse.from_entity(company)


@router.get(
    "/companies/{company_id}",
    response_model=CompanyDetailResponse,
    summary="Get a company",
    responses={404: {"description": "Company not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_company(
    request: Request,
    company_id: UUID,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> CompanyDetailResponse:
    """Get a company with its members."""
    company, members = await service.get_company(company_id)
    return CompanyDetailResponse(
        data=CompanyResponse.from_entity(company),
        members=[CompanyMemberResponse.from_entity(m) for m in members],
    )


@router.patch(
    "/companies/{company_id}",
    response_model=CompanyResponse,
    summary="Update a company",
    responses={
        200: {"description": "Company updated"},
        404: {"description": "Company not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_company(
    request: Request,
    company_id: UUID,
    body: UpdateCompanyRequest,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> CompanyResponse:
    """Update a company's name and contact details."""
    company = await service.update_company(
        company_id,
        company=body.company,
        name=body.name,
        phone=body.phone,
        email=body.email,
        description=body.description,
    )
    return CompanyResponse.from_entity(company)


@router.delete(
    "/companies/{company_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a company",
    responses={
        204: {"description": "Company deleted"},
        404: {"description": "Company not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_company(
    request: Request,
    company_id: UUID,
    admin: AdminCapabilities,
    service: CompanyService = Depends(get_company_service),
) -> None:
    """Delete a company together with its memberships and invitations."""
    await service.delete_company(company_id)
    return None


@router.get(
    "/companies/{company_id}/invitations",
    response_model=PendingInvitationListResponse,
    summary="List a company's invitations",
    responses={404: {"description": "Company not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_company_invitations(
    request: Request,
    company_id: UUID,
    admin: AdminCapabilities,
    service: InvitationService = Depends(get_invitation_service),
) -> PendingInvitationListResponse:
    """List invitations sent for a company, claimed ones included."""
    invitations = await service.get_company_invitations(company_id)
    data = [
        PendingInvitationResponse(
            id=inv.id,
            email=inv.email,
            client_id=inv.company_id,
            role=inv.role.value,
            name=inv.name,
            created_at=inv.created_at,
            claimed_at=inv.claimed_at,
            claimed_by=inv.claimed_by,
        )
        for inv in invitations
    ]
    return PendingInvitationListResponse(data=data, meta={"total": len(data)})
