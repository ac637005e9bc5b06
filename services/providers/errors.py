"""Error types for rate providers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for provider errors."""

    UNKNOWN = "unknown"
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    PARSE = "parse"
    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    TIMEOUT = "timeout"
    SHIPMENT_FAILED = "shipment_failed"


@dataclass(frozen=True, slots=True)
class ProviderError:
    """
    Error returned by a rate provider operation.

    Attributes:
        code: Error code identifying the type of error.
        message: Human-readable error message.
        provider_code: Code of the provider that produced the error.
        details: Additional error details, usually the response body.
    """

    code: ErrorCode
    message: str
    provider_code: str
    details: str | None = None

    @property
    def detailed_message(self) -> str:
        """Message with the provider-supplied details appended, if any."""
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"[{self.provider_code}] {self.code.value}: {self.message} ({self.details})"
        return f"[{self.provider_code}] {self.code.value}: {self.message}"


def AuthenticationError(
    provider_code: str,
    message: str = "Authentication failed",
    details: str | None = None,
) -> ProviderError:
    """Create an authentication error."""
    return ProviderError(
        code=ErrorCode.AUTHENTICATION,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def NetworkError(
    provider_code: str,
    message: str = "Network error",
    details: str | None = None,
) -> ProviderError:
    """Create a network error."""
    return ProviderError(
        code=ErrorCode.NETWORK,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def ParseError(
    provider_code: str,
    message: str = "Failed to parse response",
    details: str | None = None,
) -> ProviderError:
    """Create a parse error."""
    return ProviderError(
        code=ErrorCode.PARSE,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def NotFoundError(
    provider_code: str,
    message: str = "Resource not found",
    details: str | None = None,
) -> ProviderError:
    """Create a not found error."""
    return ProviderError(
        code=ErrorCode.NOT_FOUND,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def InvalidRequestError(
    provider_code: str,
    message: str = "Request rejected",
    details: str | None = None,
) -> ProviderError:
    """Create an invalid request error (4xx other than auth/not found)."""
    return ProviderError(
        code=ErrorCode.INVALID_REQUEST,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def WaitTimeoutError(
    provider_code: str,
    message: str = "Timed out waiting for provider",
    details: str | None = None,
) -> ProviderError:
    """Create a timeout error."""
    return ProviderError(
        code=ErrorCode.TIMEOUT,
        message=message,
        provider_code=provider_code,
        details=details,
    )


def ShipmentFailedError(
    provider_code: str,
    message: str = "Shipment processing failed",
    details: str | None = None,
) -> ProviderError:
    """Create an error for a shipment the provider could not process."""
    return ProviderError(
        code=ErrorCode.SHIPMENT_FAILED,
        message=message,
        provider_code=provider_code,
        details=details,
    )
