"""
Webhook signature verification.

GitHub signs each delivery with HMAC-SHA1 of the raw body, keyed with the
webhook secret, and sends it as ``X-Hub-Signature: sha1=<hex digest>``.
"""

import hashlib
import hmac
from typing import Optional

from fxabot.utils.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_PREFIX = "sha1="


def compute_signature(payload: bytes, secret: str) -> str:
    """Return the ``sha1=<hex>`` header value GitHub would send for `payload`."""
    digest = hmac.new(secret.encode(), payload, hashlib.sha1).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(payload: bytes, secret: Optional[str], signature: Optional[str]) -> bool:
    """
    Verify webhook signature for security.

    Args:
        payload: Raw request payload
        secret: Configured webhook secret, None to skip verification
        signature: Value of the X-Hub-Signature header, if sent

    Returns:
        True if the request should be accepted, False otherwise
    """
    if secret is None:
        logger.warning("No webhook secret configured, unknown event origin")
        return True

    if signature is None:
        logger.debug("No X-Hub-Signature header, rejecting")
        return False

    expected = compute_signature(payload, secret).encode()
    received = signature.encode()

    if len(received) != len(expected):
        logger.debug(f"Signature has wrong length: {len(received)} != {len(expected)}")
        return False

    if not hmac.compare_digest(received, expected):
        logger.error(f"Signature does not match, theirs = {received!r}")
        return False

    logger.debug("Valid webhook signature")
    return True
