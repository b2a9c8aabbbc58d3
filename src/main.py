"""Main FastAPI application entry point."""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.auth_callback import router as auth_callback_router
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Multi-tenant Client Portal\n\n"
            "Backend for a client portal where each person belongs to a "
            "company. People arrive through emailed invitation, magic-link "
            "or recovery links and are walked from the link to a password "
            "and a company membership.\n\n"
            "### Onboarding\n"
            "1. `GET /auth/callback` lands the email link\n"
            "2. `POST /api/v1/onboarding/session` turns the link into a session\n"
            "3. `POST /api/v1/onboarding/password` sets the password and links "
            "the company\n\n"
            "### Authentication\n"
            "All other endpoints (except `/health`) require a valid access token "
            "in the Authorization header or the session cookie:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PUT/DELETE: 10 requests/minute\n"
            "- Sign-in link requests: 5 requests/minute"
        ),
        version=VERSION,
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Email link landing",
            },
            {
                "name": "onboarding",
                "description": "Link to session to password to company",
            },
            {
                "name": "me",
                "description": "Current user capabilities and companies",
            },
            {
                "name": "admin",
                "description": "Invitations, users and companies (administrators only)",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_callback_router)
    app.include_router(v1_router, prefix="/api/v1")

    logger.info("app_created", environment=settings.app_env)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
