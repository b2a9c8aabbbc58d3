"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    NO_CREDENTIAL = "NO_CREDENTIAL"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ROLE = "INVALID_ROLE"
    CANNOT_DELETE_SELF = "CANNOT_DELETE_SELF"

    # Identity provider errors (502)
    PROVIDER_ERROR = "PROVIDER_ERROR"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class NoCredentialError(AppException):
    """No usable session, code or token was found for the request."""

    def __init__(
        self,
        message: str = "No valid session or token found. Please use the link from your email again.",
    ) -> None:
        super().__init__(
            error_code=ErrorCode.NO_CREDENTIAL,
            message=message,
            status_code=401,
        )


class ProviderError(AppException):
    """The identity provider rejected or failed a request.

    ``message`` carries the provider's own message so it can be shown
    verbatim. ``provider_status`` is the HTTP status returned by the
    provider, when there was one.
    """

    def __init__(
        self,
        message: str,
        provider_status: int | None = None,
        operation: str | None = None,
    ) -> None:
        self.provider_status = provider_status
        self.operation = operation
        status_code = 502
        if provider_status is not None and 400 <= provider_status < 500:
            status_code = 400
        super().__init__(
            error_code=ErrorCode.PROVIDER_ERROR,
            message=message,
            status_code=status_code,
            details={"operation": operation, "provider_status": provider_status},
        )


class PasswordValidationError(AppException):
    """The submitted password was rejected before reaching the provider."""

    def __init__(self, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class CompanyNotFoundError(AppException):
    """Company not found."""

    def __init__(self, company_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.COMPANY_NOT_FOUND,
            message=f"Company not found: {company_id}",
            status_code=404,
            details={"company_id": company_id},
        )


class InvalidRoleError(AppException):
    """Role is not one of the allowed values."""

    def __init__(self, role: str, allowed: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message=f"Invalid role. Must be one of: {', '.join(allowed)}",
            status_code=400,
            details={"role": role, "allowed": allowed},
        )


class CannotDeleteSelfError(AppException):
    """An administrator tried to delete their own account."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.CANNOT_DELETE_SELF,
            message="You cannot delete your own account",
            status_code=400,
        )
