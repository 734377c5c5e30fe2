"""FastAPI exception handlers for gateway errors.

Converts GatewayError into an ErrorResponse body with the status code mapped
from its ErrorCode, and converts provider failures that escape a route into a
generic 502 without leaking the provider's response.

Usage:
    from relay_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from relay.models.errors import (
    ErrorCode,
    ErrorResponse,
    GatewayError,
    ProviderAuthenticationError,
    ProviderError,
)
from relay.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Tenant resolution
    ErrorCode.API_KEY_MISSING: HTTP_401_UNAUTHORIZED,
    ErrorCode.TENANT_NOT_FOUND: HTTP_401_UNAUTHORIZED,
    ErrorCode.MERCHANT_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Inbound webhook authentication
    ErrorCode.SIGNATURE_MISMATCH: HTTP_401_UNAUTHORIZED,
    ErrorCode.SIGNATURE_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.WEBHOOK_VERIFICATION_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    # Request validation
    ErrorCode.INVALID_ORDER_REQUEST: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ORDER_CODE: HTTP_400_BAD_REQUEST,
    # Upstream provider
    ErrorCode.PROVIDER_AUTH_FAILED: HTTP_502_BAD_GATEWAY,
    ErrorCode.PROVIDER_ERROR: HTTP_502_BAD_GATEWAY,
    # Debug surfaces
    ErrorCode.DEBUG_DISABLED: HTTP_403_FORBIDDEN,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode (400 if unmapped)."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


def _error_response(code: ErrorCode, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=get_http_status_for_error(code),
        content=body.model_dump(mode="json"),
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Handle GatewayError with the status mapped from its code."""
    return _error_response(exc.code, exc.to_response())


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """Handle provider failures with a generic 502."""
    code = (
        ErrorCode.PROVIDER_AUTH_FAILED
        if isinstance(exc, ProviderAuthenticationError)
        else ErrorCode.PROVIDER_ERROR
    )
    logger.error(
        "Provider call failed on %s %s: %s (upstream status %s)",
        request.method,
        request.url.path,
        exc,
        exc.status_code,
    )
    return _error_response(code, ErrorResponse.from_code(code))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(GatewayError, gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ProviderError, provider_error_handler)  # type: ignore[arg-type]
