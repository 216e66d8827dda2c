"""Tests for webhook verification, replay protection and routing."""

import hashlib
import hmac
import json
import threading
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from licensechain.exceptions import InvalidTimestampError
from licensechain.webhooks import (
    EventRouter,
    ReplayGuard,
    SignatureVerifier,
    VerifiedEvent,
    WebhookDelivery,
    WebhookEventType,
    WebhookHandler,
    WebhookResult,
    generate_signature,
    is_fresh,
    parse_timestamp,
    verify_signature,
)
from licensechain.webhooks.handler import INVALID_SIGNATURE, TIMESTAMP_TOO_OLD

SECRET = "whsec_test_secret"
NOW = 1_700_000_000.0
NOW_ISO = "2023-11-14T22:13:20Z"


def _body(payload):
    return json.dumps(payload)


def _sign(body, secret=SECRET):
    return generate_signature(body, secret)


@pytest.fixture
def handler():
    return WebhookHandler(SECRET, replay_guard=ReplayGuard(clock=lambda: NOW))


class TestSignature:
    """Test HMAC signature generation and verification."""

    def test_generate_signature_format(self):
        """Signature is 'sha256=' followed by the hex HMAC."""
        payload = '{"type":"license.created"}'
        expected = hmac.new(SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()

        assert generate_signature(payload, SECRET) == f"sha256={expected}"

    def test_bytes_and_str_payloads_match(self):
        assert generate_signature(b"abc", SECRET) == generate_signature("abc", SECRET)

    def test_verify_round_trip(self):
        payload = _body({"type": "user.created", "data": {"id": "u1"}})
        assert verify_signature(payload, _sign(payload), SECRET)

    def test_verify_bare_hex(self):
        payload = "hello"
        bare = _sign(payload).split("=", 1)[1]
        assert verify_signature(payload, bare, SECRET)

    def test_verify_uppercase_hex(self):
        payload = "hello"
        assert verify_signature(payload, _sign(payload).upper().replace("SHA256", "sha256"), SECRET)

    def test_tampered_payload_fails(self):
        signature = _sign('{"amount": 10}')
        assert not verify_signature('{"amount": 1000}', signature, SECRET)

    def test_wrong_secret_fails(self):
        payload = "hello"
        assert not verify_signature(payload, _sign(payload, "other"), SECRET)

    def test_prefix_mismatch_fails(self):
        payload = "hello"
        digest = _sign(payload).split("=", 1)[1]
        assert not verify_signature(payload, f"sha1={digest}", SECRET)

    @pytest.mark.parametrize("signature", [None, "", "sha256=", "sha256=zz", "sha256=é", 12345])
    def test_malformed_signature_fails(self, signature):
        """Malformed signatures fail verification without raising."""
        assert verify_signature("hello", signature, SECRET) is False

    def test_empty_secret_fails(self):
        assert not verify_signature("hello", _sign("hello"), "")

    def test_unknown_algorithm_fails(self):
        assert not verify_signature("hello", "nope=abc", SECRET, algorithm="nope")

    def test_other_algorithm(self):
        signature = generate_signature("hello", SECRET, algorithm="sha512")
        assert signature.startswith("sha512=")
        assert verify_signature("hello", signature, SECRET, algorithm="sha512")


class TestSignatureVerifier:
    """Test SignatureVerifier."""

    def test_requires_secret(self):
        with pytest.raises(ValueError):
            SignatureVerifier("")

    def test_verify_and_generate(self):
        verifier = SignatureVerifier(SECRET)
        assert verifier.verify("body", verifier.generate("body"))

    def test_repr_hides_secret(self):
        assert SECRET not in repr(SignatureVerifier(SECRET))

    def test_verify_event_type(self):
        assert SignatureVerifier.verify_event_type({"type": "license.created"}, "license.created")
        assert SignatureVerifier.verify_event_type({"event": "user.deleted"}, "user.deleted")
        assert not SignatureVerifier.verify_event_type({}, "user.deleted")


class TestParseTimestamp:
    """Test timestamp parsing."""

    def test_epoch_number(self):
        assert parse_timestamp(NOW) == NOW
        assert parse_timestamp(int(NOW)) == NOW

    def test_numeric_string(self):
        assert parse_timestamp("1700000000") == NOW

    def test_iso_string(self):
        assert parse_timestamp(NOW_ISO) == NOW
        assert parse_timestamp("2023-11-14T22:13:20+00:00") == NOW

    def test_naive_datetime_is_utc(self):
        assert parse_timestamp(datetime(2023, 11, 14, 22, 13, 20)) == NOW

    def test_aware_datetime(self):
        assert parse_timestamp(datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)) == NOW

    @pytest.mark.parametrize("value", ["not a date", "nan", True, [1], 10**400, "1" * 400])
    def test_invalid_values(self, value):
        with pytest.raises(InvalidTimestampError) as exc_info:
            parse_timestamp(value)
        assert exc_info.value.message.startswith("Invalid timestamp format")


class TestReplayProtection:
    """Test freshness checks."""

    def test_now_is_fresh(self):
        assert is_fresh(NOW, now=NOW)

    def test_boundary_is_inclusive(self):
        assert is_fresh(NOW - 300, now=NOW)
        assert is_fresh(NOW + 300, now=NOW)

    def test_outside_window_is_stale(self):
        assert not is_fresh(NOW - 301, now=NOW)
        assert not is_fresh(NOW + 301, now=NOW)

    def test_custom_tolerance(self):
        assert is_fresh(NOW - 60, now=NOW, tolerance=60)
        assert not is_fresh(NOW - 61, now=NOW, tolerance=60)

    def test_iso_timestamp(self):
        assert is_fresh(NOW_ISO, now=NOW)

    def test_missing_timestamp_is_fresh(self):
        assert is_fresh(None, now=NOW)
        assert is_fresh("  ", now=NOW)

    def test_malformed_timestamp_raises(self):
        with pytest.raises(InvalidTimestampError):
            is_fresh("yesterday-ish", now=NOW)

    def test_guard_uses_clock(self):
        guard = ReplayGuard(tolerance=10, clock=lambda: NOW)
        assert guard.is_fresh(NOW - 10)
        assert not guard.is_fresh(NOW - 11)

    def test_guard_require_timestamp(self):
        assert ReplayGuard().is_fresh(None)
        assert not ReplayGuard(require_timestamp=True).is_fresh(None)

    def test_guard_rejects_negative_tolerance(self):
        with pytest.raises(ValueError):
            ReplayGuard(tolerance=-1)


class TestEventRouter:
    """Test EventRouter."""

    def test_default_handlers_acknowledge(self):
        router = EventRouter()
        event = VerifiedEvent(type="license.created")

        assert router.dispatch(event) == {"status": "processed", "event": "license.created"}

    def test_every_event_type_has_default(self):
        router = EventRouter()
        for event_type in WebhookEventType:
            assert router.is_registered(event_type)

    def test_unknown_type_is_ignored(self):
        router = EventRouter()
        result = router.dispatch(VerifiedEvent(type="subscription.paused"))
        assert result == {"status": "ignored", "event": "subscription.paused"}

    def test_register_replaces_default(self):
        router = EventRouter()
        custom = Mock(return_value={"status": "processed", "event": "license.revoked", "n": 1})

        router.register(WebhookEventType.LICENSE_REVOKED, custom)
        event = VerifiedEvent(type="license.revoked", data={"license_key": "K"})
        result = router.dispatch(event)

        custom.assert_called_once_with(event)
        assert result["n"] == 1

    def test_decorator_registration(self):
        router = EventRouter(install_defaults=False)

        @router.on("payment.failed")
        def on_failed(event):
            return {"status": "processed", "event": event.type, "amount": event.data["amount"]}

        result = router.dispatch(VerifiedEvent(type="payment.failed", data={"amount": 5}))
        assert result["amount"] == 5

    def test_register_requires_callable(self):
        with pytest.raises(TypeError):
            EventRouter().register("license.created", "not callable")

    def test_unregister(self):
        router = EventRouter()

        assert router.unregister("license.created") is True
        assert router.unregister("license.created") is False
        assert router.dispatch(VerifiedEvent(type="license.created"))["status"] == "ignored"

    def test_clear_and_registered_events(self):
        router = EventRouter()
        assert len(router.registered_events()) == len(WebhookEventType)

        router.clear()
        assert router.registered_events() == []

    def test_custom_default_handler(self):
        router = EventRouter(default_handler=lambda e: {"status": "queued", "event": e.type})
        assert router.dispatch(VerifiedEvent(type="x.y"))["status"] == "queued"

    def test_handler_errors_propagate(self):
        router = EventRouter()
        router.register("user.created", Mock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            router.dispatch(VerifiedEvent(type="user.created"))

    def test_concurrent_registration(self):
        router = EventRouter(install_defaults=False)

        def register(i):
            router.register(f"custom.{i}", lambda e: {"status": "processed"})

        threads = [threading.Thread(target=register, args=(i,)) for i in range(50)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(router.registered_events()) == 50


class TestVerifiedEvent:
    """Test payload normalization."""

    def test_from_payload(self):
        event = VerifiedEvent.from_payload(
            {"id": "evt_1", "type": "license.created", "created_at": NOW_ISO, "data": {"a": 1}}
        )
        assert event.id == "evt_1"
        assert event.type == "license.created"
        assert event.created_at == NOW_ISO
        assert event.data == {"a": 1}

    def test_alternate_keys(self):
        event = VerifiedEvent.from_payload(
            {"event": "user.updated", "createdAt": NOW, "object": {"b": 2}}
        )
        assert event.type == "user.updated"
        assert event.created_at == NOW
        assert event.data == {"b": 2}

    def test_missing_type_is_unknown(self):
        event = VerifiedEvent.from_payload({"data": "not a dict"})
        assert event.type == "unknown"
        assert event.data == {}


class TestWebhookHandler:
    """Test the end-to-end delivery pipeline."""

    def test_valid_delivery(self, handler):
        body = _body({"id": "evt_1", "type": "license.created", "created_at": NOW_ISO})

        result = handler.handle(body, _sign(body), NOW_ISO)

        assert result.valid
        assert result.status == "processed"
        assert result.event == "license.created"

    def test_invalid_signature(self, handler):
        body = _body({"type": "license.created"})

        result = handler.handle(body, "sha256=" + "0" * 64, NOW_ISO)

        assert result == WebhookResult(valid=False, error=INVALID_SIGNATURE)

    def test_tampered_body_rejected_before_dispatch(self, handler):
        custom = Mock()
        handler.on("payment.completed", custom)
        original = _body({"type": "payment.completed", "data": {"amount": 10}})
        tampered = _body({"type": "payment.completed", "data": {"amount": 1000}})

        result = handler.handle(tampered, _sign(original), NOW_ISO)

        assert result.error == INVALID_SIGNATURE
        custom.assert_not_called()

    def test_missing_signature(self, handler):
        result = handler.handle(_body({"type": "license.created"}), None)
        assert result.error == INVALID_SIGNATURE

    def test_stale_timestamp(self, handler):
        body = _body({"type": "license.created"})

        result = handler.handle(body, _sign(body), NOW - 301)

        assert not result.valid
        assert result.error == TIMESTAMP_TOO_OLD

    def test_boundary_timestamp_accepted(self, handler):
        body = _body({"type": "license.created"})
        assert handler.handle(body, _sign(body), NOW - 300).valid

    def test_malformed_timestamp(self, handler):
        body = _body({"type": "license.created"})

        result = handler.handle(body, _sign(body), "garbage")

        assert not result.valid
        assert result.error.startswith("Invalid timestamp format")

    def test_falls_back_to_payload_created_at(self, handler):
        body = _body({"type": "license.created", "created_at": NOW - 1000})

        result = handler.handle(body, _sign(body))

        assert result.error == TIMESTAMP_TOO_OLD

    def test_out_of_range_created_at_rejected(self, handler):
        body = _body({"type": "license.created", "created_at": 10**400})

        result = handler.handle(body, _sign(body))

        assert not result.valid
        assert result.error.startswith("Invalid timestamp format")

    def test_no_timestamp_anywhere_accepted(self, handler):
        body = _body({"type": "license.created"})
        assert handler.handle(body, _sign(body)).valid

    def test_no_timestamp_rejected_when_required(self):
        handler = WebhookHandler(SECRET, require_timestamp=True)
        body = _body({"type": "license.created"})

        assert handler.handle(body, _sign(body)).error == TIMESTAMP_TOO_OLD

    def test_invalid_json(self, handler):
        body = "{not json"

        result = handler.handle(body, _sign(body), NOW)

        assert not result.valid
        assert result.error.startswith("Invalid JSON payload")

    def test_non_object_json(self, handler):
        body = "[1, 2]"
        result = handler.handle(body, _sign(body), NOW)
        assert result.error == "Invalid JSON payload: expected an object"

    def test_bytes_body(self, handler):
        body = _body({"type": "user.created"}).encode()
        assert handler.handle(body, _sign(body), NOW).valid

    def test_unknown_event_ignored(self, handler):
        body = _body({"type": "subscription.paused"})

        result = handler.handle(body, _sign(body), NOW)

        assert result.valid
        assert result.status == "ignored"

    def test_handler_exception_becomes_failure(self, handler):
        handler.on("license.revoked", Mock(side_effect=RuntimeError("database down")))
        body = _body({"type": "license.revoked"})

        result = handler.handle(body, _sign(body), NOW)

        assert result == WebhookResult(valid=False, error="database down")

    def test_extra_handler_keys_kept(self, handler):
        @handler.on("license.expired")
        def on_expired(event):
            return {"status": "processed", "event": event.type, "notified": True}

        body = _body({"type": "license.expired"})
        result = handler.handle(body, _sign(body), NOW)

        assert result.to_dict() == {
            "valid": True,
            "status": "processed",
            "event": "license.expired",
            "notified": True,
        }

    def test_off(self, handler):
        assert handler.off("license.created")
        assert "license.created" not in handler.registered_events()

    def test_handle_delivery(self, handler):
        body = _body({"id": "evt_9", "type": "product.created"})
        delivery = WebhookDelivery(
            id="evt_9",
            event_type="product.created",
            created_at=NOW_ISO,
            raw_body=body,
            signature=_sign(body),
        )

        result = handler.handle_delivery(delivery)

        assert result.valid
        assert result.event == "product.created"

    def test_handle_request_reads_headers(self, handler):
        body = _body({"type": "license.validated"})
        headers = {
            "x-licensechain-signature": _sign(body),
            "X-LICENSECHAIN-TIMESTAMP": NOW_ISO,
        }

        result = handler.handle_request(body, headers)

        assert result.valid
        assert result.event == "license.validated"

    def test_handle_request_missing_signature(self, handler):
        result = handler.handle_request("{}", {"Content-Type": "application/json"})
        assert result.error == INVALID_SIGNATURE

    def test_requires_secret(self):
        with pytest.raises(ValueError):
            WebhookHandler("")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LICENSECHAIN_WEBHOOK_SECRET", SECRET)
        monkeypatch.setenv("LICENSECHAIN_WEBHOOK_TOLERANCE", "60")

        handler = WebhookHandler.from_env()

        assert handler.replay_guard.tolerance == 60
        body = _body({"type": "license.created"})
        assert handler.handle(body, _sign(body)).valid
