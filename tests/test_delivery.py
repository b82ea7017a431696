"""
Unit tests for signed webhook request helpers.

Tests header creation on the sending side and API Gateway event
validation on the receiving side.
"""

import base64
import json
import time
import unittest
from unittest.mock import patch

from webhook_lib.delivery import (
    SIGNATURE_HEADER,
    create_signed_request,
    validate_webhook_signature,
)
from webhook_lib.payload import decode_payload
from webhook_lib.signature import generate_signature_header, parse_signature_header, verify_signature


class TestCreateSignedRequest(unittest.TestCase):
    """Test header creation for outgoing deliveries."""

    def setUp(self):
        self.secret = "whsec_test_secret_key"
        self.body = '{"event":"task.created","timestamp":"2025-01-15T10:30:00Z","data":{"id":"1"}}'

    def test_headers_present(self):
        headers = create_signed_request(self.body, self.secret, timestamp=1705315800)

        self.assertEqual(set(headers), {SIGNATURE_HEADER, "Content-Type"})
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(
            headers[SIGNATURE_HEADER],
            generate_signature_header(self.secret, 1705315800, self.body),
        )

    def test_default_timestamp_is_now(self):
        with patch("webhook_lib.delivery.time.time", return_value=1705315800.75):
            headers = create_signed_request(self.body, self.secret)

        self.assertEqual(parse_signature_header(headers[SIGNATURE_HEADER]).timestamp, 1705315800)

    def test_signed_request_verifies(self):
        headers = create_signed_request(self.body, self.secret)

        result = verify_signature(self.secret, headers[SIGNATURE_HEADER], self.body, max_age_seconds=300)

        self.assertTrue(result.valid)


class TestValidateWebhookSignature(unittest.TestCase):
    """Test validation of API Gateway events."""

    def setUp(self):
        self.secret = "whsec_my_production_secret"
        self.body = json.dumps(
            {
                "event": "task.created",
                "timestamp": "2025-01-15T10:30:00Z",
                "data": {"id": "task-123", "name": "Complete API integration", "done": None},
            },
            separators=(",", ":"),
        )

    def create_test_event(self, signature_header, body, header_name=SIGNATURE_HEADER):
        """Helper to create API Gateway event."""
        headers = {
            "Content-Type": "application/json",
            "Host": "hooks.example.com",
        }
        if signature_header is not None:
            headers[header_name] = signature_header
        return {
            "httpMethod": "POST",
            "path": "/webhooks/tasks",
            "headers": headers,
            "queryStringParameters": None,
            "body": body,
            "isBase64Encoded": False,
        }

    def test_validate_valid_signature(self):
        header = generate_signature_header(self.secret, int(time.time()), self.body)
        event = self.create_test_event(header, self.body)

        result = validate_webhook_signature(event, self.secret)

        self.assertIs(result, True)
        self.assertEqual(decode_payload(event["body"]).event, "task.created")

    def test_header_lookup_case_insensitive(self):
        header = generate_signature_header(self.secret, int(time.time()), self.body)
        event = self.create_test_event(header, self.body, header_name="x-webhook-signature")

        self.assertIs(validate_webhook_signature(event, self.secret), True)

    def test_validate_invalid_signature(self):
        event = self.create_test_event(f"t={int(time.time())},v1=INVALID_SIGNATURE", self.body)

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 401)
        self.assertEqual(result["body"], "Invalid signature: Invalid signature")

    def test_validate_missing_signature_header(self):
        event = self.create_test_event(None, self.body)

        with self.assertLogs("webhook_lib.delivery", level="WARNING"):
            result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 401)
        self.assertIn("Missing X-Webhook-Signature header", result["body"])

    def test_validate_missing_headers(self):
        result = validate_webhook_signature({"body": self.body, "headers": None}, self.secret)

        self.assertEqual(result["statusCode"], 401)

    def test_validate_malformed_header(self):
        event = self.create_test_event("invalid-format", self.body)

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["body"], "Invalid signature: Invalid signature format")

    def test_validate_oversized_timestamp(self):
        event = self.create_test_event("t=" + "9" * 5000 + ",v1=ab", self.body)

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 401)
        self.assertEqual(result["body"], "Invalid signature: Invalid signature format")

    def test_validate_expired_timestamp(self):
        old_timestamp = int(time.time()) - 3600  # 1 hour ago
        header = generate_signature_header(self.secret, old_timestamp, self.body)
        event = self.create_test_event(header, self.body)

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 401)
        self.assertEqual(result["body"], "Invalid signature: Signature timestamp too old")

    def test_validate_expired_timestamp_without_max_age(self):
        header = generate_signature_header(self.secret, 1705315800, self.body)
        event = self.create_test_event(header, self.body)

        self.assertIs(validate_webhook_signature(event, self.secret, max_age_seconds=None), True)

    def test_validate_base64_body(self):
        raw_body = self.body.encode("utf-8")
        header = generate_signature_header(self.secret, int(time.time()), raw_body)
        event = self.create_test_event(header, base64.b64encode(raw_body).decode("ascii"))
        event["isBase64Encoded"] = True

        self.assertIs(validate_webhook_signature(event, self.secret), True)

    def test_validate_invalid_base64_body(self):
        header = generate_signature_header(self.secret, int(time.time()), self.body)
        event = self.create_test_event(header, "not base64!")
        event["isBase64Encoded"] = True

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 400)

    def test_validate_tampered_body(self):
        header = generate_signature_header(self.secret, int(time.time()), self.body)
        event = self.create_test_event(header, self.body.replace("task-123", "task-666"))

        result = validate_webhook_signature(event, self.secret)

        self.assertEqual(result["statusCode"], 401)
        self.assertEqual(result["body"], "Invalid signature: Invalid signature")


if __name__ == "__main__":
    unittest.main()
