"""Unit tests for inbound webhook signature verification."""

import hashlib
import hmac

import pytest

from conftest import TENANT_A_SECRET
from relay.models.errors import ErrorCode, GatewayError
from relay.models.tenant import TenantConfig
from relay.services.webhook_verifier import (
    WebhookVerifier,
    compute_signature,
    verify_signature,
)

PAYLOAD = b'{"EventTypeId":1796,"EventData":{"OrderCode":111}}'


def _hmac(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


class TestVerifySignature:
    """Tests for the pure verification function."""

    def test_matching_signature_verifies(self) -> None:
        assert compute_signature(PAYLOAD, "secret") == _hmac("secret", PAYLOAD)
        assert verify_signature(PAYLOAD, _hmac("secret", PAYLOAD), "secret") is True

    def test_signature_under_other_secret_fails(self) -> None:
        assert verify_signature(PAYLOAD, _hmac("secret", PAYLOAD), "other-secret") is False

    def test_modified_body_fails(self) -> None:
        signature = _hmac("secret", PAYLOAD)

        assert verify_signature(PAYLOAD + b" ", signature, "secret") is False

    def test_missing_signature_fails_when_secret_configured(self) -> None:
        assert verify_signature(PAYLOAD, None, "secret") is False
        assert verify_signature(PAYLOAD, "", "secret") is False

    @pytest.mark.parametrize("header", [None, "", "garbage", _hmac("x", PAYLOAD)])
    def test_no_secret_always_verifies(self, header: str | None) -> None:
        assert verify_signature(PAYLOAD, header, "") is True
        assert verify_signature(PAYLOAD, header, None) is True

    def test_uppercase_hex_is_accepted(self) -> None:
        assert verify_signature(PAYLOAD, _hmac("secret", PAYLOAD).upper(), "secret") is True

    @pytest.mark.parametrize("header", ["abc\xe9", "\u00e9" * 64, "sha256=\u2603"])
    def test_non_ascii_signature_fails_without_error(self, header: str) -> None:
        """Should treat undecodable header values as a mismatch, not crash."""
        assert verify_signature(PAYLOAD, header, "secret") is False


class TestWebhookVerifier:
    """Tests for the per-tenant signature policy."""

    def test_valid_signature_authenticates(self, tenant_a: TenantConfig) -> None:
        WebhookVerifier().authenticate(tenant_a, PAYLOAD, _hmac(TENANT_A_SECRET, PAYLOAD))

    def test_wrong_signature_raises_mismatch(self, tenant_a: TenantConfig) -> None:
        with pytest.raises(GatewayError) as exc_info:
            WebhookVerifier().authenticate(tenant_a, PAYLOAD, _hmac("wrong", PAYLOAD))

        assert exc_info.value.code == ErrorCode.SIGNATURE_MISMATCH

    def test_missing_signature_raises_mismatch(self, tenant_a: TenantConfig) -> None:
        with pytest.raises(GatewayError) as exc_info:
            WebhookVerifier().authenticate(tenant_a, PAYLOAD, None)

        assert exc_info.value.code == ErrorCode.SIGNATURE_MISMATCH

    def test_non_ascii_signature_raises_mismatch(self, tenant_a: TenantConfig) -> None:
        with pytest.raises(GatewayError) as exc_info:
            WebhookVerifier().authenticate(tenant_a, PAYLOAD, "abc\xe9")

        assert exc_info.value.code == ErrorCode.SIGNATURE_MISMATCH

    def test_cross_tenant_signature_fails(
        self, tenant_a: TenantConfig, tenant_b: TenantConfig
    ) -> None:
        """Should reject a body signed for tenant A when presented to tenant B."""
        signature = _hmac(TENANT_A_SECRET, PAYLOAD)

        with pytest.raises(GatewayError):
            WebhookVerifier().authenticate(tenant_b, PAYLOAD, signature)

    def test_tenant_without_secret_accepts_unsigned(self, open_tenant: TenantConfig) -> None:
        WebhookVerifier().authenticate(open_tenant, PAYLOAD, None)

    def test_require_signature_without_secret_rejects(
        self, strict_tenant: TenantConfig
    ) -> None:
        with pytest.raises(GatewayError) as exc_info:
            WebhookVerifier().authenticate(strict_tenant, PAYLOAD, "anything")

        assert exc_info.value.code == ErrorCode.SIGNATURE_REQUIRED
