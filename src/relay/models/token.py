"""OAuth2 bearer token record cached per tenant."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TokenRecord(BaseModel):
    """Bearer token obtained from the provider's client-credentials exchange.

    In-memory only, replaced wholesale on refresh. `expires_at` already
    includes the refresh margin, so a record is usable strictly before it.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    access_token: str = Field(..., repr=False, description="Opaque bearer token")
    expires_at: datetime = Field(..., description="Absolute expiry (UTC), margin applied")

    def is_valid(self, now: datetime) -> bool:
        """Check whether the token may still be used at `now`."""
        return now < self.expires_at
