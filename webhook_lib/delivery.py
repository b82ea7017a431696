"""
Helpers for sending and receiving signed webhook requests.

Wraps the signature primitives for the two ends of a delivery: building
headers for an outgoing request, and validating an API Gateway event.
"""

import base64
import binascii
import logging
import time
from typing import Any, Dict, Optional, Union

from webhook_lib.signature import generate_signature_header, verify_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"


def create_signed_request(
    body: Union[str, bytes],
    secret: Union[str, bytes],
    timestamp: Optional[int] = None,
) -> Dict[str, str]:
    """
    Create the headers for a signed webhook delivery.

    Args:
        body: The exact request body that will be sent
        secret: The shared webhook secret
        timestamp: Unix timestamp in seconds (default: now)

    Returns:
        Dictionary of headers to add to the request
    """
    if timestamp is None:
        timestamp = int(time.time())

    return {
        SIGNATURE_HEADER: generate_signature_header(secret, timestamp, body),
        "Content-Type": "application/json",
    }


def validate_webhook_signature(
    event: Dict[str, Any],
    secret: Union[str, bytes],
    max_age_seconds: Optional[int] = 300,
) -> Union[bool, Dict[str, Any]]:
    """
    Validate the webhook signature of an AWS API Gateway event.

    Args:
        event: API Gateway event with headers, body and isBase64Encoded
        secret: The shared webhook secret
        max_age_seconds: Maximum signature age (default: 5 minutes, None disables)

    Returns:
        True if signature is valid
        Dict with statusCode and body if validation fails (e.g., {"statusCode": 401, "body": "..."})
    """
    headers = event.get("headers", {}) or {}

    # Find signature header (case-insensitive)
    signature_header = None
    for key, value in headers.items():
        if key.lower() == SIGNATURE_HEADER.lower():
            signature_header = value
            break

    if not signature_header:
        logger.warning("Webhook request rejected: missing %s header", SIGNATURE_HEADER)
        return {
            "statusCode": 401,
            "body": f"Missing {SIGNATURE_HEADER} header",
        }

    body: Union[str, bytes] = event.get("body", "") or ""
    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Webhook request rejected: body is not valid base64")
            return {
                "statusCode": 400,
                "body": "Invalid base64 body",
            }

    result = verify_signature(
        secret,
        signature_header,
        body,
        max_age_seconds=max_age_seconds,
    )

    if result.valid:
        return True

    logger.warning("Webhook request rejected: %s", result.error.name)
    return {
        "statusCode": 401,
        "body": f"Invalid signature: {result.error.value}",
    }
