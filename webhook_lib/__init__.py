"""
Webhook Signing Library for HTTP Webhook Requests.

Provides HMAC-SHA256 signature generation and verification for webhook
deliveries, with replay protection based on the signed timestamp.

The signature header has the form ``t=<unix_seconds>,v1=<hex_signature>``,
where the signature is HMAC-SHA256 over ``"<unix_seconds>.<raw body>"``.

Basic Usage:
    from webhook_lib import generate_signature_header, verify_signature, decode_payload

    # Sender: Sign a request body
    header = generate_signature_header("whsec_...", int(time.time()), body)

    # Receiver: Verify the raw body, rejecting signatures older than 5 minutes
    result = verify_signature("whsec_...", header, body, max_age_seconds=300)
    if not result.valid:
        return 401, result.error.value

    payload = decode_payload(body)
    print(payload.event)  # e.g. "task.created"

API Gateway Usage:
    from webhook_lib import validate_webhook_signature

    result = validate_webhook_signature(event, secret="whsec_...")
    if result is not True:
        return result  # {"statusCode": 401, "body": "..."}
"""

from webhook_lib.signature import (
    CLOCK_SKEW_SECONDS,
    ParsedSignature,
    WebhookError,
    WebhookSignatureResult,
    compare_signatures,
    compute_webhook_signature,
    format_signature_header,
    generate_signature_header,
    parse_signature_header,
    verify_signature,
    verify_timestamp,
)

from webhook_lib.payload import (
    WebhookPayload,
    decode_payload,
)

from webhook_lib.delivery import (
    SIGNATURE_HEADER,
    create_signed_request,
    validate_webhook_signature,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Signature functions
    "CLOCK_SKEW_SECONDS",
    "ParsedSignature",
    "WebhookError",
    "WebhookSignatureResult",
    "compare_signatures",
    "compute_webhook_signature",
    "format_signature_header",
    "generate_signature_header",
    "parse_signature_header",
    "verify_signature",
    "verify_timestamp",
    # Payload
    "WebhookPayload",
    "decode_payload",
    # Request helpers
    "SIGNATURE_HEADER",
    "create_signed_request",
    "validate_webhook_signature",
]
