"""Per-request correlation id and access logging.

The id comes from the caller's X-Correlation-ID header when present, so a
tenant can follow its own request id through the gateway logs. Otherwise one
is generated. Deliveries triggered while handling the request (order.created,
relayed webhooks) log under the same id.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from relay.utils.logging import clear_correlation_id, get_logger, set_correlation_id

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id to the request, echo it and log the outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.correlation_id = set_correlation_id(
            request.headers.get(CORRELATION_ID_HEADER)
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, request.url.path)
            clear_correlation_id()
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={"status_code": response.status_code, "duration_ms": round(elapsed_ms, 1)},
        )
        response.headers[CORRELATION_ID_HEADER] = request.state.correlation_id
        clear_correlation_id()
        return response
