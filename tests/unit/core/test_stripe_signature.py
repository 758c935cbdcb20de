"""
Tests for webhook signature verification.

Covers the ``t=...,v1=...`` header scheme, tolerance window and payload
parsing order.
"""

import json
import time

import pytest

from core.errors import UnauthorizedError
from core.integrations.stripe import construct_event

SECRET = "whsec_unit"
PAYLOAD = json.dumps({
    "id": "evt_1",
    "type": "invoice.paid",
    "data": {"object": {"id": "in_1", "status_transitions": {"paid_at": 1_756_742_400}}},
}).encode()


class TestConstructEvent:
    """Verification of signed notifications."""

    def test_valid_signature(self, sign_payload):
        event = construct_event(PAYLOAD, sign_payload(PAYLOAD, SECRET), SECRET)

        assert event["id"] == "evt_1"
        assert event["type"] == "invoice.paid"
        assert isinstance(event["data"]["object"], dict)
        assert event["data"]["object"]["status_transitions"]["paid_at"] == 1_756_742_400

    def test_any_matching_v1_is_accepted(self, sign_payload):
        """Secret rotation sends several v1 signatures."""
        good = sign_payload(PAYLOAD, SECRET)
        timestamp, signature = good.split(",")
        header = f"{timestamp},v1={'0' * 64},{signature}"

        assert construct_event(PAYLOAD, header, SECRET)["id"] == "evt_1"

    def test_signature_mismatch(self, sign_payload):
        with pytest.raises(UnauthorizedError):
            construct_event(PAYLOAD, sign_payload(PAYLOAD, "whsec_other"), SECRET)

    def test_tampered_body(self, sign_payload):
        tampered = PAYLOAD.replace(b"invoice.paid", b"invoice.void")
        with pytest.raises(UnauthorizedError):
            construct_event(tampered, sign_payload(PAYLOAD, SECRET), SECRET)

    def test_stale_timestamp(self, sign_payload):
        header = sign_payload(PAYLOAD, SECRET, timestamp=int(time.time()) - 301)
        with pytest.raises(UnauthorizedError):
            construct_event(PAYLOAD, header, SECRET, tolerance=300)

    def test_timestamp_inside_tolerance(self, sign_payload):
        header = sign_payload(PAYLOAD, SECRET, timestamp=int(time.time()) - 200)
        assert construct_event(PAYLOAD, header, SECRET, tolerance=300)

    @pytest.mark.parametrize("sig_header", [
        None,
        "",
        "garbage",
        "v1=abcdef",
        "t=notanumber,v1=abcdef",
    ])
    def test_malformed_or_missing_header(self, sig_header):
        with pytest.raises(UnauthorizedError):
            construct_event(PAYLOAD, sig_header, SECRET)

    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret(self, sign_payload, secret):
        with pytest.raises(UnauthorizedError):
            construct_event(PAYLOAD, sign_payload(PAYLOAD, SECRET), secret)

    def test_signed_non_json_body(self, sign_payload):
        body = b"not json"
        with pytest.raises(UnauthorizedError):
            construct_event(body, sign_payload(body, SECRET), SECRET)
