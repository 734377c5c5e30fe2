"""API routes package.

Routers are organized by concern and registered in main.py with the /api
prefix:

- health: liveness
- webhooks: inbound provider webhooks per merchant key
- payments: orders, transactions and saved cards (X-Api-Key)
- wallets: merchant wallets (X-Api-Key)
- redirects: checkout landing pages
- debug: webhook simulation and callback introspection (non-production)
"""

from relay_api.routes.debug import router as debug_router
from relay_api.routes.health import router as health_router
from relay_api.routes.payments import router as payments_router
from relay_api.routes.redirects import router as redirects_router
from relay_api.routes.wallets import router as wallets_router
from relay_api.routes.webhooks import router as webhooks_router

__all__ = [
    "debug_router",
    "health_router",
    "payments_router",
    "redirects_router",
    "wallets_router",
    "webhooks_router",
]
