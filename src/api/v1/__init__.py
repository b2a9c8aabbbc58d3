"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.admin import router as admin_router
from api.v1.routes.me import router as me_router
from api.v1.routes.onboarding import router as onboarding_router

router = APIRouter()
router.include_router(onboarding_router)
router.include_router(me_router)
router.include_router(admin_router)
