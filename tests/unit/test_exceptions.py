"""Tests for custom exceptions and error handling."""

from fastapi import status

from api.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    CrawltollError,
    ExternalServiceError,
    PaymentProviderError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)


def test_crawltoll_error_base() -> None:
    """Test base CrawltollError."""
    error = CrawltollError(message="Test error", code="test_error")
    assert error.message == "Test error"
    assert error.code == "test_error"
    assert error.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert error.details == {}
    assert str(error) == "Test error"


def test_validation_error() -> None:
    """Test ValidationError."""
    error = ValidationError("Invalid URL", field="url")
    assert error.code == "validation_error"
    assert error.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert error.details == {"field": "url"}


def test_authentication_error() -> None:
    """Test AuthenticationError."""
    error = AuthenticationError()
    assert error.message == "Invalid API key"
    assert error.code == "authentication_error"
    assert error.status_code == status.HTTP_401_UNAUTHORIZED


def test_conflict_error() -> None:
    error = ConflictError("Site already registered")
    assert error.code == "conflict"
    assert error.status_code == status.HTTP_409_CONFLICT


def test_rate_limit_error() -> None:
    """Test RateLimitError details."""
    error = RateLimitError(limit=100, current=100)
    assert error.code == "rate_limit_exceeded"
    assert error.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert error.details == {"limit": 100, "current": 100}

    assert RateLimitError().details == {}


def test_external_service_error() -> None:
    error = ExternalServiceError("stripe", "timeout")
    assert error.message == "stripe: timeout"
    assert error.status_code == status.HTTP_502_BAD_GATEWAY
    assert error.details == {"service": "stripe"}


def test_payment_provider_error() -> None:
    error = PaymentProviderError("Failed to create payment")
    assert isinstance(error, ExternalServiceError)
    assert error.code == "payment_provider_error"
    assert error.status_code == status.HTTP_502_BAD_GATEWAY


def test_bad_request_error() -> None:
    error = BadRequestError("Invalid signature", code="invalid_signature")
    assert error.code == "invalid_signature"
    assert error.status_code == status.HTTP_400_BAD_REQUEST


def test_service_unavailable_error() -> None:
    error = ServiceUnavailableError("Webhook secret not configured")
    assert error.code == "service_unavailable"
    assert error.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
