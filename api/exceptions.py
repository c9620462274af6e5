"""Custom exceptions and error handling."""

from typing import Any

from fastapi import status


class CrawltollError(Exception):
    """Base exception for the crawltoll application."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(CrawltollError):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class AuthenticationError(CrawltollError):
    """Unknown or inactive API key."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(
            message=message,
            code="authentication_error",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ConflictError(CrawltollError):
    """Resource conflict."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="conflict",
            status_code=status.HTTP_409_CONFLICT,
        )


class RateLimitError(CrawltollError):
    """Rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        limit: int | None = None,
        current: int | None = None,
    ):
        details: dict[str, Any] = {}
        if limit is not None:
            details["limit"] = limit
        if current is not None:
            details["current"] = current
        super().__init__(
            message=message,
            code="rate_limit_exceeded",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details=details,
        )


class ExternalServiceError(CrawltollError):
    """External service error."""

    def __init__(self, service: str, message: str, code: str = "external_service_error"):
        super().__init__(
            message=f"{service}: {message}",
            code=code,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"service": service},
        )


class PaymentProviderError(ExternalServiceError):
    """The payment provider could not create or settle a payment."""

    def __init__(self, message: str):
        super().__init__("stripe", message, code="payment_provider_error")


class BadRequestError(CrawltollError):
    """Malformed or unverifiable request."""

    def __init__(self, message: str, code: str = "bad_request"):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class ServiceUnavailableError(CrawltollError):
    """A required integration is not configured."""

    def __init__(self, message: str, code: str = "service_unavailable"):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
