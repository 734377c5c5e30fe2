"""FastAPI application for the payment gateway and webhook relay.

This package provides REST endpoints for:
- Inbound provider webhooks, verified per merchant and relayed to tenants
- Orders, transactions, saved cards and wallets on behalf of each merchant
- Debug surfaces for simulating webhooks (disabled in production)

The application context (tenant registry, per-tenant provider clients,
callback store, relay pipeline) is built once in create_app() and stored on
app.state.
"""

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from relay import __version__
from relay.config import GatewaySettings
from relay.context import build_context
from relay.services.merchant_registry import MerchantRegistry
from relay.utils.logging import configure_logging, get_logger
from relay_api.exceptions import register_exception_handlers
from relay_api.middleware.correlation import CorrelationIdMiddleware
from relay_api.routes import (
    debug_router,
    health_router,
    payments_router,
    redirects_router,
    wallets_router,
    webhooks_router,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close the shared HTTP client on shutdown."""
    yield
    await app.state.context.aclose()


def create_app(
    settings: GatewaySettings | None = None,
    environ: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    registry: MerchantRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application and its context.

    Args:
        settings: Process settings (read from the environment if omitted)
        environ: Environment mapping for settings and merchants
        transport: HTTP transport for outbound calls (tests pass a mock)
        registry: Pre-built merchant registry

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = GatewaySettings.from_environ(environ)
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Payment Gateway API",
        description="Multi-tenant payment gateway and webhook relay",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = build_context(settings, environ, transport, registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api")
    app.include_router(webhooks_router, prefix="/api")
    app.include_router(payments_router, prefix="/api")
    app.include_router(wallets_router, prefix="/api")
    app.include_router(redirects_router, prefix="/api")
    app.include_router(debug_router, prefix="/api")

    @app.get("/api/ping")
    async def ping() -> dict[str, Any]:
        """Root liveness check at /api/ping."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "payment-gateway",
        }

    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("relay_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
