"""LicenseChain Python SDK.

A typed client for the LicenseChain licensing API providing:
- License, user, product, application and webhook management
- Automatic retry with exponential backoff for transient failures
- Typed errors for every failure class
- Webhook signature verification, replay protection and event routing

Quick Start:
    >>> from licensechain import LicenseChainClient
    >>> client = LicenseChainClient(api_key="lc_live_...")
    >>> client.licenses.validate("ABCD1234EFGH5678IJKL9012MNOP3456")

Receiving webhooks:
    >>> from licensechain import WebhookHandler
    >>> handler = WebhookHandler(secret="whsec_...")
    >>> result = handler.handle(body, signature, timestamp)
"""

from licensechain.constants import SDK_VERSION as __version__

from licensechain.api import Page, RequestPipeline
from licensechain.client import LicenseChainClient
from licensechain.config import Configuration, LicenseChainSettings, get_settings
from licensechain.exceptions import (
    AuthenticationError,
    ErrorKind,
    InvalidResponseError,
    InvalidTimestampError,
    LicenseChainError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from licensechain.logging import get_logger, setup_logging
from licensechain.validator import LicenseValidator
from licensechain.webhooks import (
    EventRouter,
    SignatureVerifier,
    VerifiedEvent,
    WebhookDelivery,
    WebhookEventType,
    WebhookHandler,
    WebhookResult,
)

__all__ = [
    "__version__",
    # Client
    "LicenseChainClient",
    "LicenseValidator",
    "RequestPipeline",
    "Page",
    # Configuration
    "Configuration",
    "LicenseChainSettings",
    "get_settings",
    "get_logger",
    "setup_logging",
    # Errors
    "ErrorKind",
    "LicenseChainError",
    "ValidationError",
    "InvalidTimestampError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "InvalidResponseError",
    "NetworkError",
    # Webhooks
    "WebhookHandler",
    "EventRouter",
    "SignatureVerifier",
    "VerifiedEvent",
    "WebhookDelivery",
    "WebhookEventType",
    "WebhookResult",
]
