"""Tests for LINE webhook signature verification."""

import base64
import hashlib
import hmac

import pytest

from stockpile.core.errors import AuthenticationError
from stockpile.interface.webhook_security import authenticate_webhook, compute_signature, validate_webhook_signature


SECRET = "test-channel-secret"
BODY = b'{"destination":"Uxxx","events":[]}'


def sign(body: bytes, secret: str = SECRET) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


@pytest.mark.unit
class TestComputeSignature:
    def test_matches_hmac_sha256_base64(self) -> None:
        assert compute_signature(BODY, SECRET) == sign(BODY)


@pytest.mark.unit
class TestValidateWebhookSignature:
    """Tests for validate_webhook_signature."""

    def test_valid_signature(self) -> None:
        result = validate_webhook_signature(BODY, sign(BODY), SECRET)

        assert result.is_valid is True
        assert result.error_message is None

    def test_wrong_secret(self) -> None:
        result = validate_webhook_signature(BODY, sign(BODY, "other-secret"), SECRET)

        assert result.is_valid is False
        assert result.error_message == "Invalid signature"

    def test_body_modified_after_signing(self) -> None:
        """Any change to the raw bytes, even whitespace, invalidates the signature."""
        signature = sign(BODY)

        result = validate_webhook_signature(BODY + b" ", signature, SECRET)

        assert result.is_valid is False

    @pytest.mark.parametrize("signature", [None, ""])
    def test_missing_signature(self, signature: str | None) -> None:
        result = validate_webhook_signature(BODY, signature, SECRET)

        assert result.is_valid is False
        assert result.error_message == "Missing signature"

    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret_rejects_everything(self, secret: str | None) -> None:
        result = validate_webhook_signature(BODY, sign(BODY), secret)

        assert result.is_valid is False
        assert result.error_message == "Channel secret not configured"


@pytest.mark.unit
class TestAuthenticateWebhook:
    def test_valid_signature_passes(self) -> None:
        authenticate_webhook(BODY, sign(BODY), SECRET)

    @pytest.mark.parametrize(
        ("signature", "secret", "reason"),
        [
            ("bogus", SECRET, "Invalid signature"),
            (None, SECRET, "Missing signature"),
            (sign(BODY), None, "Channel secret not configured"),
        ],
    )
    def test_rejection_raises_authentication_error(
        self, signature: str | None, secret: str | None, reason: str
    ) -> None:
        with pytest.raises(AuthenticationError, match=reason):
            authenticate_webhook(BODY, signature, secret)
