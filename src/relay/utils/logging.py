"""Logging for the gateway: request correlation and webhook context.

Every record carries the correlation id of the request being served (or
"no-correlation-id" outside a request), and the formatter prefixes it so one
request's lines can be grepped together. Two helpers log the relay's inbound
events and outbound deliveries with consistent `extra=` fields.

Usage:
    from relay.utils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Forwarding event", extra={"order_code": "1234567890123456"})

CorrelationIdMiddleware sets and clears the id around each request.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

NO_CORRELATION_ID = "no-correlation-id"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Scoped to the current asyncio task
_request_correlation_id: ContextVar[str | None] = ContextVar(
    "request_correlation_id", default=None
)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating a UUID4 if none is given."""
    value = correlation_id or str(uuid.uuid4())
    _request_correlation_id.set(value)
    return value


def get_correlation_id() -> str | None:
    """Correlation id bound to the current context, if any."""
    return _request_correlation_id.get()


def clear_correlation_id() -> None:
    _request_correlation_id.set(None)


def _stamp(record: logging.LogRecord) -> str:
    correlation_id = getattr(record, "correlation_id", None)
    if correlation_id is None:
        correlation_id = get_correlation_id() or NO_CORRELATION_ID
        record.correlation_id = correlation_id
    return correlation_id


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation id to every record passing a logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Prefix each formatted line with `[correlation-id]`."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = _stamp(record)
        return f"[{correlation_id}] {super().format(record)}"


def configure_logging(level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; existing root handlers are reformatted
    rather than duplicated.

    Args:
        level: Root log level name (e.g. "INFO", "DEBUG")
    """
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(StructuredFormatter(DEFAULT_LOG_FORMAT))
    root.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """Module logger with the correlation id filter installed once."""
    logger = logging.getLogger(name)
    if not any(isinstance(existing, CorrelationIdFilter) for existing in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    order_code: str | int | None,
    *,
    tenant_key: str | None = None,
    transaction_id: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log an inbound provider webhook event with structured context.

    Args:
        logger: Logger instance
        event_type: Provider or canonical event type (e.g., "payment.success")
        order_code: Provider order code, if present in the payload
        tenant_key: Merchant key the webhook was posted to
        transaction_id: Provider transaction id if available
        result: Processing result (received, forwarded, unroutable, ignored, error)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {
        "event_type": event_type,
        "order_code": order_code,
    }

    if tenant_key:
        context["tenant_key"] = tenant_key
    if transaction_id:
        context["transaction_id"] = transaction_id
    if result:
        context["result"] = result
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Webhook event: {event_type} (order {order_code})"]
    if tenant_key:
        msg_parts.append(f"tenant={tenant_key}")
    if result:
        msg_parts.append(f"result={result}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)

    if result == "error":
        logger.error(message, extra=context)
    elif result in ("unroutable", "ignored"):
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_delivery(
    logger: logging.Logger,
    event_type: str,
    order_code: str | int,
    url: str,
    *,
    status_code: int | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log an outbound delivery attempt to a tenant endpoint.

    Args:
        logger: Logger instance
        event_type: Canonical event type being delivered
        order_code: Order code of the event
        url: Destination URL
        status_code: HTTP status returned by the destination, if any
        error: Failure description; None means the attempt succeeded
        **extra: Additional context fields
    """
    context: dict[str, Any] = {
        "event_type": event_type,
        "order_code": order_code,
        "url": url,
    }
    if status_code is not None:
        context["status_code"] = status_code
    if error:
        context["error"] = error
    context.update(extra)

    msg_parts = [f"Webhook delivery: {event_type} (order {order_code}) -> {url}"]
    if status_code is not None:
        msg_parts.append(f"status={status_code}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)
