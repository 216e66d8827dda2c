"""LicenseChain API client.

The client owns one request pipeline and one instance of every resource
service; all services share that pipeline.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .api.pipeline import RequestPipeline
from .config import Configuration
from .exceptions import ValidationError
from .logging import get_logger
from .services import (
    AnalyticsService,
    ApplicationService,
    AuthService,
    LicenseService,
    ProductService,
    UserService,
    WebhookService,
)

logger = get_logger(__name__)


def _build_config(factory: Callable[[], Configuration]) -> Configuration:
    try:
        return factory()
    except PydanticValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid configuration: {messages}") from e


class LicenseChainClient:
    """High-level client for the LicenseChain API.

    Examples:
        >>> client = LicenseChainClient(api_key="lc_live_...")
        >>> user = client.users.create("jane@example.com", name="Jane")
        >>> license = client.licenses.create(user["id"], product_id)

        Configuration from the environment (LICENSECHAIN_API_KEY, ...):
        >>> with LicenseChainClient.from_env() as client:
        ...     client.health()

    Attributes:
        licenses, users, products, webhooks, apps, analytics, auth: Resource services
    """

    def __init__(
        self,
        config: Optional[Configuration] = None,
        *,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        **overrides: Any,
    ):
        """Initialize the client.

        Args:
            config: Complete configuration; ``api_key``/``overrides`` are applied on top
            api_key: API key when no config is given
            http_client: Optional httpx client to send requests with
            sleep: Function used to wait between retries
            **overrides: Other Configuration fields (base_url, timeout, retry_count, retry_delay)

        Raises:
            ValidationError: If the API key is missing or a setting is invalid
        """
        if config is None:
            config = _build_config(
                lambda: Configuration(api_key=api_key or "", **overrides)
            )
        elif api_key is not None or overrides:
            changes = dict(overrides)
            if api_key is not None:
                changes["api_key"] = api_key
            base = config
            config = _build_config(lambda: base.update(**changes))

        self.pipeline = RequestPipeline(config, http_client=http_client, sleep=sleep)

        self.licenses = LicenseService(self.pipeline)
        self.users = UserService(self.pipeline)
        self.products = ProductService(self.pipeline)
        self.webhooks = WebhookService(self.pipeline)
        self.apps = ApplicationService(self.pipeline)
        self.analytics = AnalyticsService(self.pipeline)
        self.auth = AuthService(self.pipeline)

        logger.debug("Client initialized", base_url=config.base_url)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "LicenseChainClient":
        """Create a client from LICENSECHAIN_* environment variables."""
        config = _build_config(Configuration.from_env)
        return cls(config, **kwargs)

    @property
    def config(self) -> Configuration:
        return self.pipeline.config

    def update_config(self, **changes: Any) -> Configuration:
        """Replace the configuration with a copy that has ``changes`` applied.

        The swap is a single assignment, so in-flight requests keep the
        configuration they started with.

        Raises:
            ValidationError: If the resulting configuration is invalid
        """
        current = self.pipeline.config
        new_config = _build_config(lambda: current.update(**changes))
        self.pipeline.config = new_config
        logger.info("Client configuration updated", fields=sorted(changes))
        return new_config

    def ping(self) -> Dict[str, Any]:
        return self.pipeline.get("/ping")

    def health(self) -> Dict[str, Any]:
        return self.pipeline.get("/health")

    def status(self) -> Dict[str, Any]:
        """Get system status."""
        return self.pipeline.get("/status")

    def close(self) -> None:
        self.pipeline.close()

    def __enter__(self) -> "LicenseChainClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
