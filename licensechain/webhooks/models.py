"""Webhook data models."""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class WebhookEventType(str, Enum):
    """Event types delivered by the LicenseChain API."""

    LICENSE_CREATED = "license.created"
    LICENSE_UPDATED = "license.updated"
    LICENSE_REVOKED = "license.revoked"
    LICENSE_EXPIRED = "license.expired"
    LICENSE_VALIDATED = "license.validated"
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"
    APP_CREATED = "app.created"
    APP_UPDATED = "app.updated"
    APP_DELETED = "app.deleted"
    PAYMENT_COMPLETED = "payment.completed"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_REFUNDED = "payment.refunded"


EventTypeLike = Union[str, WebhookEventType]


def event_type_key(event_type: EventTypeLike) -> str:
    """Normalize an event type (enum member or string) to its string key."""
    if isinstance(event_type, WebhookEventType):
        return event_type.value
    return str(event_type)


class WebhookDelivery(BaseModel):
    """One inbound webhook call as received from the API."""

    id: Optional[str] = None
    event_type: Optional[str] = None
    created_at: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    signature: str = ""
    raw_body: Union[str, bytes] = b""


class VerifiedEvent(BaseModel):
    """Normalized event whose signature and freshness have been checked."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    type: str = "unknown"
    created_at: Optional[Union[str, int, float]] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "VerifiedEvent":
        """Project a decoded payload, accepting the key spellings producers use."""
        event_type = payload.get("type") or payload.get("event") or "unknown"
        created_at = payload.get("created_at")
        if created_at is None:
            created_at = payload.get("createdAt")
        if not isinstance(created_at, (str, int, float)):
            created_at = None
        data = payload.get("data")
        if data is None:
            data = payload.get("object")
        event_id = payload.get("id")
        return cls(
            id=str(event_id) if event_id is not None else None,
            type=str(event_type),
            created_at=created_at,
            data=data if isinstance(data, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class WebhookResult(BaseModel):
    """Outcome of handling one delivery.

    Successful deliveries carry the handler's record (``status``, ``event`` and
    any extra keys it returned); failures carry ``valid=False`` and ``error``.
    """

    model_config = ConfigDict(extra="allow")

    valid: bool = True
    error: Optional[str] = None
    status: Optional[str] = None
    event: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "WebhookResult":
        return cls(valid=False, error=error)

    @classmethod
    def from_handler(cls, record: Mapping[str, Any]) -> "WebhookResult":
        fields = dict(record)
        fields.pop("valid", None)
        fields.pop("error", None)
        return cls(valid=True, **fields)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
