"""
Webhook payload envelope decoding.

Only call decode_payload after the body's signature has been verified.
"""

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

_ENVELOPE_FIELDS = ("event", "timestamp", "data")


@dataclass
class WebhookPayload(Generic[T]):
    """Envelope wrapping every webhook event."""

    event: str  # e.g. "task.created"; new event names may appear at any time
    timestamp: str  # ISO 8601
    data: T


def decode_payload(body: Union[str, bytes]) -> WebhookPayload[Any]:
    """
    Decode a webhook request body into its envelope.

    Args:
        body: The raw request body as a JSON string or bytes

    Returns:
        WebhookPayload with ``data`` passed through as decoded JSON

    Raises:
        json.JSONDecodeError: If the body is not valid JSON
        ValueError: If the JSON is not an object with event, timestamp and data
    """
    document = json.loads(body)

    if not isinstance(document, dict):
        raise ValueError(f"Webhook payload must be a JSON object, got {type(document).__name__}")

    missing = [name for name in _ENVELOPE_FIELDS if name not in document]
    if missing:
        raise ValueError(f"Webhook payload missing field(s): {', '.join(missing)}")

    return WebhookPayload(
        event=document["event"],
        timestamp=document["timestamp"],
        data=document["data"],
    )
