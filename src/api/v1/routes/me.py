"""Current user API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentCapabilities, CurrentUser
from api.dependencies.services import get_company_service
from api.v1.schemas.company import CompanyListResponse, CompanyResponse
from api.v1.schemas.me import CapabilitiesResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.company_service import CompanyService

router = APIRouter(tags=["me"])


@router.get(
    "/me",
    response_model=CapabilitiesResponse,
    summary="Get current user capabilities",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_me(
    request: Request,
    capabilities: CurrentCapabilities,
) -> CapabilitiesResponse:
    """Return the current user's global role and company roles."""
    return CapabilitiesResponse.from_capabilities(capabilities)


@router.get(
    "/companies/mine",
    response_model=CompanyListResponse,
    summary="List my companies",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_my_companies(
    request: Request,
    user: CurrentUser,
    service: CompanyService = Depends(get_company_service),
) -> CompanyListResponse:
    """List the companies the current user belongs to."""
    companies = await service.get_user_companies(user.id)
    data = [CompanyResponse.from_entity(c) for c in companies]
    return CompanyListResponse(data=data, meta={"total": len(data)})
