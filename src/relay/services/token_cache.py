"""Per-tenant OAuth2 bearer token cache.

Obtains tokens with the client-credentials grant and keeps the current one
until shortly before the provider's stated expiry. No locking: two concurrent
refreshes for the same tenant may both hit the provider, and the later one
simply replaces the earlier record.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import httpx

from relay.models.errors import ProviderAuthenticationError
from relay.models.tenant import TenantConfig
from relay.models.token import TokenRecord
from relay.utils.logging import get_logger

logger = get_logger(__name__)

# Refresh this long before the provider's stated expiry
REFRESH_MARGIN = timedelta(seconds=300)

TOKEN_PATH = "/connect/token"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class TokenCache:
    """Caches one bearer token for one tenant."""

    def __init__(
        self,
        tenant: TenantConfig,
        http_client: httpx.AsyncClient,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize an empty cache for a tenant.

        Args:
            tenant: Tenant whose OAuth2 client credentials are used
            http_client: Shared async HTTP client
            clock: Source of the current UTC time (injectable for tests)
        """
        self._tenant = tenant
        self._http = http_client
        self._clock = clock
        self._record: TokenRecord | None = None

    @property
    def record(self) -> TokenRecord | None:
        """The currently cached token record, if any."""
        return self._record

    async def get_token(self) -> str:
        """Get a bearer token, exchanging credentials only when needed.

        Returns:
            Access token string.

        Raises:
            ProviderAuthenticationError: If the token exchange fails. The
                previously cached record (if any) is left untouched.
        """
        record = self._record
        if record is not None and record.is_valid(self._clock()):
            return record.access_token

        record = await self._fetch_token()
        self._record = record
        return record.access_token

    def invalidate(self) -> None:
        """Drop the cached token so the next call re-authenticates."""
        self._record = None

    async def _fetch_token(self) -> TokenRecord:
        credentials = self._tenant.credentials
        url = f"{self._tenant.endpoints.auth_url}{TOKEN_PATH}"

        try:
            response = await self._http.post(
                url,
                data={"grant_type": "client_credentials"},
                auth=httpx.BasicAuth(credentials.client_id, credentials.client_secret),
            )
            response.raise_for_status()
            body = response.json()
            access_token = body["access_token"]
            expires_in = int(body["expires_in"])
        except httpx.HTTPStatusError as e:
            logger.error(
                "Token exchange rejected for merchant %s: status %s",
                self._tenant.tenant_key,
                e.response.status_code,
            )
            raise ProviderAuthenticationError(
                "Failed to get access token", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "Token exchange failed for merchant %s: %s", self._tenant.tenant_key, e
            )
            raise ProviderAuthenticationError("Failed to get access token") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(
                "Malformed token response for merchant %s: %s", self._tenant.tenant_key, e
            )
            raise ProviderAuthenticationError("Malformed token response") from e

        expires_at = self._clock() + timedelta(seconds=expires_in) - REFRESH_MARGIN
        logger.info(
            "Obtained access token for merchant %s (valid until %s)",
            self._tenant.tenant_key,
            expires_at.isoformat(),
        )
        return TokenRecord(access_token=access_token, expires_at=expires_at)
