"""Inbound webhook processing.

``WebhookHandler.handle`` authenticates, freshness-checks, decodes, normalizes
and dispatches one delivery. Payloads are never decoded before their signature
has been verified. The handler always returns a ``WebhookResult`` so that
delivery endpoints can answer deterministically.
"""

import json
from typing import Any, List, Mapping, Optional, Union

from ..config import DEFAULT_WEBHOOK_TOLERANCE, get_settings
from ..constants import DEFAULT_SIGNATURE_ALGORITHM, SIGNATURE_HEADER, TIMESTAMP_HEADER
from ..exceptions import InvalidTimestampError
from ..logging import get_logger
from .models import EventTypeLike, VerifiedEvent, WebhookDelivery, WebhookResult
from .replay import ReplayGuard, TimestampLike
from .router import EventHandler, EventRouter
from .signature import SignatureVerifier

logger = get_logger(__name__)

INVALID_SIGNATURE = "Invalid webhook signature"
TIMESTAMP_TOO_OLD = "Webhook timestamp is too old"


class WebhookHandler:
    """Verifies and routes webhook deliveries.

    Examples:
        >>> handler = WebhookHandler(secret="whsec_...")
        >>> @handler.on("license.revoked")
        ... def on_revoked(event):
        ...     disable_license(event.data["license_key"])
        ...     return {"status": "processed", "event": event.type}
        >>> result = handler.handle(request.body, request.headers["X-LicenseChain-Signature"])
        >>> result.valid
        True
    """

    def __init__(
        self,
        secret: str,
        tolerance: float = DEFAULT_WEBHOOK_TOLERANCE,
        router: Optional[EventRouter] = None,
        require_timestamp: bool = False,
        replay_guard: Optional[ReplayGuard] = None,
    ):
        """Initialize handler.

        Args:
            secret: Shared webhook signing secret
            tolerance: Allowed clock skew in seconds
            router: Event router (a router with built-in handlers if omitted)
            require_timestamp: Reject deliveries that carry no timestamp at all
            replay_guard: Custom freshness policy (overrides tolerance/require_timestamp)

        Raises:
            ValueError: If the secret is empty
        """
        self.verifier = SignatureVerifier(secret)
        self.replay_guard = replay_guard or ReplayGuard(
            tolerance=tolerance, require_timestamp=require_timestamp
        )
        self.router = router if router is not None else EventRouter()

    @classmethod
    def from_env(cls, **kwargs: Any) -> "WebhookHandler":
        """Create a handler from LICENSECHAIN_WEBHOOK_SECRET/_TOLERANCE."""
        settings = get_settings()
        kwargs.setdefault("tolerance", settings.webhook_tolerance)
        return cls(settings.webhook_secret or "", **kwargs)

    def on(self, event_type: EventTypeLike, handler: Optional[EventHandler] = None) -> Any:
        """Register a handler, directly or as a decorator."""
        if handler is not None:
            return self.router.register(event_type, handler)
        return self.router.on(event_type)

    def off(self, event_type: EventTypeLike) -> bool:
        return self.router.unregister(event_type)

    def registered_events(self) -> List[str]:
        return self.router.registered_events()

    def handle(
        self,
        raw_body: Union[str, bytes],
        signature: Optional[str],
        timestamp: TimestampLike = None,
        algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
    ) -> WebhookResult:
        """Process one delivery.

        Args:
            raw_body: Request body exactly as received
            signature: Signature header value (``sha256=<hex>``)
            timestamp: Delivery timestamp header (ISO-8601 or epoch). When
                omitted, the payload's own ``created_at`` is checked instead.
            algorithm: HMAC algorithm

        Returns:
            WebhookResult; ``valid`` is False with an ``error`` on any failure
        """
        # 1. Authenticate before touching the payload
        if not self.verifier.verify(raw_body, signature, algorithm):
            logger.warning("Webhook rejected", reason="signature")
            return WebhookResult.failure(INVALID_SIGNATURE)

        # 2. Freshness of the transport timestamp
        if timestamp is not None:
            stale = self._check_freshness(timestamp)
            if stale is not None:
                return stale

        # 3. Decode
        try:
            text = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
            payload = json.loads(text)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Webhook rejected", reason="payload", error=str(e))
            return WebhookResult.failure(f"Invalid JSON payload: {e}")
        if not isinstance(payload, dict):
            return WebhookResult.failure("Invalid JSON payload: expected an object")

        # 4. Normalize; fall back to the authenticated created_at for freshness
        event = VerifiedEvent.from_payload(payload)
        if timestamp is None:
            stale = self._check_freshness(event.created_at)
            if stale is not None:
                return stale

        # 5. Dispatch
        try:
            record = self.router.dispatch(event)
            result = WebhookResult.from_handler(record)
        except Exception as e:
            logger.error(
                "Webhook handler failed",
                event_type=event.type,
                event_id=event.id,
                error=str(e),
                exc_info=True,
            )
            return WebhookResult.failure(str(e) or type(e).__name__)

        logger.info(
            "Webhook processed",
            event_type=event.type,
            event_id=event.id,
            status=result.status,
        )
        return result

    def handle_delivery(
        self, delivery: WebhookDelivery, algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
    ) -> WebhookResult:
        """Process a delivery record (see :meth:`handle`)."""
        return self.handle(
            delivery.raw_body,
            delivery.signature,
            timestamp=delivery.created_at,
            algorithm=algorithm,
        )

    def handle_request(
        self,
        raw_body: Union[str, bytes],
        headers: Mapping[str, str],
        algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
    ) -> WebhookResult:
        """Process a delivery using its signature and timestamp headers.

        Header names are matched case-insensitively.
        """
        lowered = {str(k).lower(): v for k, v in headers.items()}
        return self.handle(
            raw_body,
            lowered.get(SIGNATURE_HEADER.lower()),
            timestamp=lowered.get(TIMESTAMP_HEADER.lower()),
            algorithm=algorithm,
        )

    def _check_freshness(self, timestamp: TimestampLike) -> Optional[WebhookResult]:
        try:
            fresh = self.replay_guard.is_fresh(timestamp)
        except InvalidTimestampError as e:
            logger.warning("Webhook rejected", reason="timestamp_format", error=e.message)
            return WebhookResult.failure(e.message)
        if not fresh:
            logger.warning("Webhook rejected", reason="stale", timestamp=str(timestamp))
            return WebhookResult.failure(TIMESTAMP_TOO_OLD)
        return None
