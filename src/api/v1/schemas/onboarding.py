"""Pydantic schemas for the onboarding (identity linking) API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.identity import AuthSession, Identity
from domain.entities.onboarding import FlowOutcome


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email address")
    return v


class StartOnboardingRequest(BaseModel):
    """Schema for starting the flow from an inbound link.

    Browsers never send the URL fragment to a server, so the client posts
    it here together with the query parameters it landed with.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": {"client_id": "456e4567-e89b-12d3-a456-426614174000"},
                "fragment": "access_token=eyJ...&refresh_token=abc&type=invite",
            }
        },
    )

    query: dict[str, str] = Field(default_factory=dict)
    fragment: str | None = Field(None, max_length=8192)


class SetPasswordRequest(BaseModel):
    """Schema for setting the password at the end of onboarding.

    Session tokens may be omitted when the session is carried by the
    Authorization header or the session cookies instead.
    """

    access_token: str | None = None
    refresh_token: str = ""
    new_password: str = Field(..., max_length=1024)
    confirm_password: str = Field(..., max_length=1024)
    client_id: UUID | None = None


class MagicLinkRequest(BaseModel):
    """Schema for requesting a fresh one-time sign-in link."""

    email: str = Field(..., min_length=3, max_length=255)
    client_id: UUID | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        return _normalize_email(v)


class SessionTokens(BaseModel):
    """Session credentials handed back to the client."""

    access_token: str
    refresh_token: str
    expires_at: int | None = None
    token_type: str = "bearer"

    @classmethod
    def from_session(cls, session: AuthSession) -> "SessionTokens":
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
            token_type=session.token_type,
        )


class IdentityResponse(BaseModel):
    """Schema for the identity behind a session."""

    id: UUID
    email: str
    display_name: str | None = None
    email_confirmed: bool = False

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(
            id=identity.id,
            email=identity.email,
            display_name=identity.display_name,
            email_confirmed=identity.email_confirmed_at is not None,
        )


class FlowOutcomeResponse(BaseModel):
    """Schema for where the onboarding flow stopped."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "state": "failed",
                "failure": "no_credential",
                "message": "No valid session or token found. "
                "Please use the link from your email again.",
                "resend_email": "user@example.com",
                "can_resend_link": True,
            }
        },
    )

    state: str
    failure: str | None = None
    message: str | None = None
    session: SessionTokens | None = None
    identity: IdentityResponse | None = None
    tenant_id: UUID | None = None
    resend_email: str | None = None
    can_resend_link: bool = False
    redirect_to: str | None = None

    @classmethod
    def from_outcome(cls, outcome: FlowOutcome) -> "FlowOutcomeResponse":
        return cls(
            state=outcome.state.value,
            failure=outcome.failure.value if outcome.failure else None,
            message=outcome.message,
            session=SessionTokens.from_session(outcome.session) if outcome.session else None,
            identity=IdentityResponse.from_identity(outcome.identity) if outcome.identity else None,
            tenant_id=outcome.tenant_id,
            resend_email=outcome.resend_email,
            can_resend_link=outcome.can_resend_link,
            redirect_to=outcome.redirect_to,
        )


class MagicLinkResponse(BaseModel):
    """Schema for the one-time link request response."""

    email: str
    message: str = "Check your email for a sign-in link"
