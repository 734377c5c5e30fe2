"""Inbound webhook signature verification.

Signatures are hex-encoded HMAC-SHA256 digests over the exact request body
bytes, keyed by the tenant's webhook secret.
"""

import hashlib
import hmac

from relay.models.errors import ErrorCode, GatewayError
from relay.models.tenant import TenantConfig
from relay.utils.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "Viva-Signature-256"


def compute_signature(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of payload under secret."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, signature: str | None, secret: str | None) -> bool:
    """Check a signature against a secret in constant time.

    Args:
        payload: Exact bytes that were signed
        signature: Signature header value (may be None when absent)
        secret: Shared secret; when empty, verification is skipped

    Returns:
        True if no secret is configured or the signature matches.
    """
    if not secret:
        return True
    if not signature:
        return False
    expected = compute_signature(payload, secret).encode("ascii")
    # Headers may carry arbitrary bytes; compare_digest rejects non-ASCII str
    candidate = signature.strip().lower().encode("utf-8", "surrogateescape")
    return hmac.compare_digest(expected, candidate)


class WebhookVerifier:
    """Applies a tenant's signature policy to an inbound webhook."""

    def authenticate(self, tenant: TenantConfig, body: bytes, signature: str | None) -> None:
        """Authenticate a webhook body for a tenant.

        Args:
            tenant: Tenant that owns the webhook path
            body: Raw request body
            signature: Value of the signature header, if present

        Raises:
            GatewayError: SIGNATURE_MISMATCH when the signature is missing or
                wrong for a tenant with a secret; SIGNATURE_REQUIRED when the
                tenant has no secret but demands signed webhooks.
        """
        if not tenant.has_webhook_secret:
            if tenant.require_signature:
                logger.warning(
                    "Rejecting webhook for merchant %s: signature required but no secret",
                    tenant.tenant_key,
                )
                raise GatewayError(ErrorCode.SIGNATURE_REQUIRED)
            logger.warning(
                "Accepting unsigned webhook for merchant %s (no webhook secret configured)",
                tenant.tenant_key,
            )
            return

        if not verify_signature(body, signature, tenant.webhook_secret):
            logger.warning("Invalid webhook signature for merchant %s", tenant.tenant_key)
            raise GatewayError(ErrorCode.SIGNATURE_MISMATCH)
