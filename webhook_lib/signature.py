import hashlib
import hmac
import logging
import re
import time
from enum import Enum
from typing import NamedTuple, Optional, Union

from cryptography.hazmat.primitives import constant_time

logger = logging.getLogger(__name__)

# Signatures may claim to be at most this far ahead of the verifier's clock
CLOCK_SKEW_SECONDS = 60

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_HEX_PATTERN = re.compile(r"(?:[0-9a-fA-F]{2})*")


class WebhookError(Enum):
    """Reasons a webhook signature is rejected."""

    FORMAT_ERROR = "Invalid signature format"
    TOO_OLD = "Signature timestamp too old"
    TOO_FAR_IN_FUTURE = "Signature timestamp in the future"
    SIGNATURE_MISMATCH = "Invalid signature"


class ParsedSignature(NamedTuple):
    """Timestamp and hex signature carried by a signature header."""

    timestamp: int
    signature: str


class WebhookSignatureResult(NamedTuple):
    """
    Outcome of verifying a webhook signature.

    Unpacks as ``(is_valid, error)``; ``error`` is None exactly when the
    signature is valid.
    """

    valid: bool
    error: Optional[WebhookError] = None

    def to_dict(self) -> dict:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "error": self.error.value}


def parse_signature_header(header: Optional[str]) -> Optional[ParsedSignature]:
    """
    Parse a webhook signature header.

    Expected format:
    X-Webhook-Signature: t=<unix_seconds>,v1=<hex_signature>

    Unknown keys and segments without '=' are skipped.

    Args:
        header: The signature header value

    Returns:
        ParsedSignature, or None if the timestamp or signature is missing
        or the timestamp is not an integer
    """
    if not header:
        return None

    timestamp_value = None
    signature = None
    for segment in header.split(","):
        key, sep, value = segment.partition("=")
        if not sep:
            continue
        if key == "t":
            timestamp_value = value
        elif key == "v1":
            signature = value

    if timestamp_value is None or signature is None:
        return None
    if not _INTEGER_PATTERN.fullmatch(timestamp_value):
        return None
    try:
        timestamp = int(timestamp_value)
    except ValueError:
        # Digit strings beyond the interpreter's int conversion limit
        return None

    return ParsedSignature(timestamp=timestamp, signature=signature)


def format_signature_header(timestamp: int, signature: str) -> str:
    """Build the canonical ``t=<timestamp>,v1=<signature>`` header value."""
    return f"t={timestamp},v1={signature}"


def compute_webhook_signature(
    secret: Union[str, bytes],
    timestamp: int,
    body: Union[str, bytes],
    encoding: str = "utf-8",
) -> str:
    """
    Compute the HMAC-SHA256 signature of a webhook body.

    The signed string is ``"<timestamp>.<body>"`` with the body taken
    exactly as received. Re-serializing a parsed body changes the bytes
    and therefore the signature.

    Args:
        secret: The shared webhook secret
        timestamp: Unix timestamp in seconds
        body: The raw request body (str is encoded with ``encoding``)
        encoding: Text encoding for str inputs (default: utf-8)

    Returns:
        Lowercase hex digest (64 characters)

    Raises:
        TypeError: If timestamp is not an integer or secret/body are not str or bytes
    """
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise TypeError(f"timestamp must be an int, got {type(timestamp).__name__}")

    key = secret.encode(encoding) if isinstance(secret, str) else secret
    payload = body.encode(encoding) if isinstance(body, str) else body
    if not isinstance(key, (bytes, bytearray)) or not isinstance(payload, (bytes, bytearray)):
        raise TypeError("secret and body must be str or bytes")

    signed_payload = str(timestamp).encode("ascii") + b"." + bytes(payload)
    return hmac.new(bytes(key), signed_payload, hashlib.sha256).hexdigest()


def generate_signature_header(
    secret: Union[str, bytes],
    timestamp: int,
    body: Union[str, bytes],
) -> str:
    """
    Generate a complete signature header value for a webhook body.

    Useful for testing webhook handlers locally.

    Returns:
        Header value in format ``t=<timestamp>,v1=<signature>``
    """
    signature = compute_webhook_signature(secret, timestamp, body)
    return format_signature_header(timestamp, signature)


def verify_timestamp(
    timestamp: int,
    now: int,
    max_age_seconds: Optional[int] = None,
) -> Optional[WebhookError]:
    """
    Check the signed timestamp against the replay window.

    With no max_age_seconds the timestamp is not checked at all.
    Signatures dated up to CLOCK_SKEW_SECONDS in the future are accepted
    regardless of max_age_seconds.

    Args:
        timestamp: Signed Unix timestamp in seconds
        now: Current Unix time in seconds
        max_age_seconds: Maximum accepted age, or None to skip the check

    Returns:
        None if the timestamp is acceptable, otherwise TOO_OLD or TOO_FAR_IN_FUTURE
    """
    if max_age_seconds is None:
        return None

    age = now - timestamp
    if age > max_age_seconds:
        return WebhookError.TOO_OLD
    if age < -CLOCK_SKEW_SECONDS:
        return WebhookError.TOO_FAR_IN_FUTURE
    return None


def compare_signatures(claimed: bytes, expected: bytes) -> bool:
    """
    Compare two raw digests without leaking where they differ.

    A length mismatch returns False immediately; lengths are public.
    """
    if len(claimed) != len(expected):
        return False
    return constant_time.bytes_eq(claimed, expected)


def _decode_hex(value: str) -> Optional[bytes]:
    if not _HEX_PATTERN.fullmatch(value):
        return None
    return bytes.fromhex(value)


def verify_signature(
    secret: Union[str, bytes],
    header: Optional[str],
    body: Union[str, bytes],
    max_age_seconds: Optional[int] = None,
    now: Optional[int] = None,
) -> WebhookSignatureResult:
    """
    Verify a webhook signature header against the raw request body.

    Args:
        secret: The shared webhook secret
        header: The X-Webhook-Signature header value
        body: The raw request body, exactly as received
        max_age_seconds: Reject signatures older than this (default: no age check)
        now: Current Unix time in seconds (default: read from the system clock)

    Returns:
        WebhookSignatureResult; failures are reported in the result, never raised
    """
    parsed = parse_signature_header(header)
    if parsed is None:
        logger.debug("Rejected webhook signature: %s", WebhookError.FORMAT_ERROR.name)
        return WebhookSignatureResult(False, WebhookError.FORMAT_ERROR)

    # Replay window before hashing
    if max_age_seconds is not None:
        current_time = int(time.time()) if now is None else now
        time_error = verify_timestamp(parsed.timestamp, current_time, max_age_seconds)
        if time_error is not None:
            logger.debug(
                "Rejected webhook signature: %s (age %ds, max %ds)",
                time_error.name,
                current_time - parsed.timestamp,
                max_age_seconds,
            )
            return WebhookSignatureResult(False, time_error)

    expected = compute_webhook_signature(secret, parsed.timestamp, body)

    claimed_bytes = _decode_hex(parsed.signature)
    expected_bytes = bytes.fromhex(expected)
    if claimed_bytes is None or not compare_signatures(claimed_bytes, expected_bytes):
        logger.debug("Rejected webhook signature: %s", WebhookError.SIGNATURE_MISMATCH.name)
        return WebhookSignatureResult(False, WebhookError.SIGNATURE_MISMATCH)

    return WebhookSignatureResult(True)
