"""Standard error codes for the payment gateway.

All HTTP-facing failures are expressed as a GatewayError carrying one of these
codes. The HTTP layer maps each code to a status (see relay_api.exceptions).
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes returned by the gateway API."""

    # Tenant resolution (ERR_TENANT_001-ERR_TENANT_003)
    API_KEY_MISSING = "ERR_TENANT_001"
    TENANT_NOT_FOUND = "ERR_TENANT_002"
    MERCHANT_NOT_FOUND = "ERR_TENANT_003"

    # Inbound webhook authentication (ERR_WEBHOOK_001-ERR_WEBHOOK_003)
    SIGNATURE_MISMATCH = "ERR_WEBHOOK_001"
    SIGNATURE_REQUIRED = "ERR_WEBHOOK_002"
    WEBHOOK_VERIFICATION_FAILED = "ERR_WEBHOOK_003"

    # Request validation (ERR_REQUEST_001-ERR_REQUEST_002)
    INVALID_ORDER_REQUEST = "ERR_REQUEST_001"
    INVALID_ORDER_CODE = "ERR_REQUEST_002"

    # Upstream provider (ERR_PROVIDER_001-ERR_PROVIDER_002)
    PROVIDER_AUTH_FAILED = "ERR_PROVIDER_001"
    PROVIDER_ERROR = "ERR_PROVIDER_002"

    # Debug surfaces
    DEBUG_DISABLED = "ERR_DEBUG_001"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.API_KEY_MISSING: "Missing X-Api-Key header",
    ErrorCode.TENANT_NOT_FOUND: "Invalid API key",
    ErrorCode.MERCHANT_NOT_FOUND: "Merchant not found",
    ErrorCode.SIGNATURE_MISMATCH: "Invalid signature",
    ErrorCode.SIGNATURE_REQUIRED: "Webhook signature required",
    ErrorCode.WEBHOOK_VERIFICATION_FAILED: "Verification failed",
    ErrorCode.INVALID_ORDER_REQUEST: "Invalid order request",
    ErrorCode.INVALID_ORDER_CODE: "Invalid order code",
    ErrorCode.PROVIDER_AUTH_FAILED: "Payment provider authentication failed",
    ErrorCode.PROVIDER_ERROR: "Payment provider request failed",
    ErrorCode.DEBUG_DISABLED: "Debug endpoint disabled in production",
}

# Recovery suggestions for API clients
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.API_KEY_MISSING: "Send the tenant API key in the X-Api-Key header",
    ErrorCode.TENANT_NOT_FOUND: "Verify the API key printed at gateway startup",
    ErrorCode.MERCHANT_NOT_FOUND: "Verify the merchant key in the webhook URL",
    ErrorCode.SIGNATURE_MISMATCH: "Verify the webhook secret configuration",
    ErrorCode.SIGNATURE_REQUIRED: "Configure a webhook secret for this merchant",
    ErrorCode.WEBHOOK_VERIFICATION_FAILED: "Check the merchant's legacy API credentials",
    ErrorCode.INVALID_ORDER_REQUEST: "Fix the request fields listed in details",
    ErrorCode.INVALID_ORDER_CODE: "Order codes are numeric",
    ErrorCode.PROVIDER_AUTH_FAILED: "Check the merchant's OAuth2 client credentials",
    ErrorCode.PROVIDER_ERROR: "Try again or contact support",
    ErrorCode.DEBUG_DISABLED: "Use a non-production environment",
}


class ErrorResponse(BaseModel):
    """Standard JSON error body for gateway API failures."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, Any]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class GatewayError(Exception):
    """Exception raised by gateway operations.

    Converted to an ErrorResponse by the HTTP exception handlers.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse.from_code(self.code, self.details)


class ProviderError(Exception):
    """Base class for failures talking to the payment provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with message and optional upstream HTTP status.

        Args:
            message: Human-readable error message.
            status_code: HTTP status returned by the provider, if any.
        """
        super().__init__(message)
        self.status_code = status_code


class ProviderAuthenticationError(ProviderError):
    """Raised when the OAuth2 token exchange is rejected or unreachable."""


class ProviderRequestError(ProviderError):
    """Raised when a provider API call fails."""
