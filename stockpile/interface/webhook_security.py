"""LINE webhook signature verification."""

import base64
import hashlib
import hmac
import logging
import secrets
from typing import NamedTuple

from stockpile.core.errors import AuthenticationError


logger = logging.getLogger(__name__)


class WebhookSecurityResult(NamedTuple):
    """Result of webhook security validation."""

    is_valid: bool
    error_message: str | None


def compute_signature(body: bytes, channel_secret: str) -> str:
    """Base64-encoded HMAC-SHA256 of the raw request body."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def validate_webhook_signature(
    body: bytes,
    received_signature: str | None,
    channel_secret: str | None,
) -> WebhookSecurityResult:
    """Check the X-Line-Signature header against the raw body.

    A missing channel secret rejects every request.

    Args:
        body: Raw request body exactly as received
        received_signature: Value of the X-Line-Signature header
        channel_secret: Configured LINE channel secret

    Returns:
        WebhookSecurityResult indicating if the signature is valid
    """
    if not channel_secret:
        logger.error("LINE channel secret not configured, rejecting webhook")
        return WebhookSecurityResult(is_valid=False, error_message="Channel secret not configured")

    if not received_signature:
        logger.warning("Missing webhook signature")
        return WebhookSecurityResult(is_valid=False, error_message="Missing signature")

    expected = compute_signature(body, channel_secret)
    if not secrets.compare_digest(received_signature.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Invalid webhook signature")
        return WebhookSecurityResult(is_valid=False, error_message="Invalid signature")

    return WebhookSecurityResult(is_valid=True, error_message=None)


def authenticate_webhook(body: bytes, received_signature: str | None, channel_secret: str | None) -> None:
    """Accept the request only if its signature verifies against the raw body.

    Raises:
        AuthenticationError: With the reason the request was rejected
    """
    result = validate_webhook_signature(body, received_signature, channel_secret)
    if not result.is_valid:
        raise AuthenticationError(result.error_message or "Invalid signature")
