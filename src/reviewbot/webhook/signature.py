"""Webhook signature verification.

GitHub signs every delivery with HMAC-SHA256 over the raw request body,
keyed by the shared webhook secret, and sends the result in the
X-Hub-Signature-256 header as ``sha256=<hex digest>``.
"""

import hashlib
import hmac
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

SIGNATURE_ALGORITHM = "sha256"


def compute_signature(secret: Union[str, bytes], payload: bytes) -> str:
    """Compute the signature header value GitHub would send for a payload.

    Args:
        secret: The shared webhook secret.
        payload: The raw request body.

    Returns:
        Signature in the form ``sha256=<hex digest>``.
    """
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    digest = hmac.new(key, payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_ALGORITHM}={digest}"


def verify_signature(
    secret: Union[str, bytes],
    payload: bytes,
    signature: Optional[str],
) -> bool:
    """Verify that a payload was signed with the shared secret.

    The comparison is constant-time over the encoded signatures. A
    missing, empty or non-ASCII signature fails verification instead of
    raising, and nothing about the payload is logged.

    Args:
        secret: The shared webhook secret.
        payload: The raw request body bytes, exactly as received.
        signature: The X-Hub-Signature-256 header value, if present.

    Returns:
        True if the signature matches, False otherwise.
    """
    if not signature:
        logger.warning("Webhook signature header missing")
        return False

    try:
        provided = signature.encode("ascii")
    except UnicodeEncodeError:
        logger.warning("Webhook signature header is not ASCII")
        return False

    expected = compute_signature(secret, payload).encode("ascii")
    if len(provided) != len(expected):
        logger.warning("Webhook signature has unexpected length")
        return False

    if not hmac.compare_digest(expected, provided):
        logger.warning("Webhook signature mismatch")
        return False

    return True
