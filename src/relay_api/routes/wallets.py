"""Wallet endpoints (X-Api-Key required)."""

from typing import Any

from fastapi import APIRouter, Depends

from relay.services.provider_client import PaymentProviderClient
from relay_api.dependencies import get_provider_client

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get(
    "",
    summary="List wallets",
    responses={
        401: {"description": "Missing or invalid X-Api-Key"},
        502: {"description": "Provider request failed"},
    },
)
async def list_wallets(
    client: PaymentProviderClient = Depends(get_provider_client),
) -> dict[str, Any]:
    """List the calling merchant's provider wallets."""
    wallets = await client.get_wallets()
    return {"success": True, "wallets": wallets}
