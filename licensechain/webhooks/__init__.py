"""Webhook verification and dispatch for LicenseChain deliveries.

Deliveries flow signature check -> replay check -> decode -> normalize ->
router -> handler.
"""

from .handler import WebhookHandler
from .models import VerifiedEvent, WebhookDelivery, WebhookEventType, WebhookResult
from .replay import ReplayGuard, is_fresh, parse_timestamp
from .router import EventRouter, acknowledge, ignore
from .signature import SignatureVerifier, generate_signature, verify_signature

__all__ = [
    "WebhookHandler",
    "WebhookDelivery",
    "WebhookEventType",
    "WebhookResult",
    "VerifiedEvent",
    "ReplayGuard",
    "is_fresh",
    "parse_timestamp",
    "EventRouter",
    "acknowledge",
    "ignore",
    "SignatureVerifier",
    "generate_signature",
    "verify_signature",
]
