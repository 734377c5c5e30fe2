"""Health check endpoint."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from relay import __version__
from relay.context import GatewayContext
from relay_api.dependencies import get_context

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health(context: GatewayContext = Depends(get_context)) -> dict[str, Any]:
    """Report liveness and how many merchants are configured."""
    return {
        "status": "ok",
        "version": __version__,
        "environment": context.settings.environment,
        "merchants": len(context.registry),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
