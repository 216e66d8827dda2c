"""Webhook subscription endpoints.

These manage where the API delivers events. Verifying the deliveries
themselves is handled by :class:`licensechain.webhooks.WebhookHandler`.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from ..api.models import Page
from ..exceptions import ValidationError
from ..logging import get_logger
from ..validation import is_valid_url, sanitize_metadata
from .base import BaseService

logger = get_logger(__name__)


class WebhookService(BaseService):
    """Manage webhook endpoints registered with the API."""

    resource_path = "/webhooks"

    def create(
        self,
        url: str,
        events: Sequence[str],
        secret: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Register a webhook endpoint.

        Args:
            url: HTTP(S) URL receiving deliveries
            events: Event types to subscribe to
            secret: Optional signing secret

        Raises:
            ValidationError: If the URL is empty or invalid, or no events are given
        """
        self._require(url, "url")
        if not is_valid_url(url):
            raise ValidationError("Invalid url format")
        if not events:
            raise ValidationError("Events cannot be empty")

        data = {
            "url": url,
            "events": [str(getattr(e, "value", e)) for e in events],
            "secret": secret,
        }
        webhook = self._unwrap(self.pipeline.post(self.resource_path, data))
        logger.info("Webhook created", webhook_id=self._resource_id(webhook), url=url)
        return webhook

    def get(self, webhook_id: str) -> Dict[str, Any]:
        self._require_uuid(webhook_id, "webhook_id")
        return self._unwrap(self.pipeline.get(self._path(webhook_id)))

    def update(self, webhook_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        self._require_uuid(webhook_id, "webhook_id")
        return self._unwrap(
            self.pipeline.put(self._path(webhook_id), sanitize_metadata(dict(updates)))
        )

    def delete(self, webhook_id: str) -> bool:
        self._require_uuid(webhook_id, "webhook_id")
        self.pipeline.delete(self._path(webhook_id))
        logger.info("Webhook deleted", webhook_id=webhook_id)
        return True

    def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Page:
        return self._list(page, limit, sort_by=sort_by, sort_order=sort_order, filters=filters)

    def stats(self) -> Dict[str, Any]:
        return self._stats()

    def test(self, webhook_id: str) -> Dict[str, Any]:
        """Ask the API to send a test delivery to the webhook."""
        self._require_uuid(webhook_id, "webhook_id")
        return self.pipeline.post(self._path(webhook_id, "test"))
