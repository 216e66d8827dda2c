"""
Configuration for the LicenseChain SDK.

``Configuration`` is the immutable per-client configuration. ``LicenseChainSettings``
loads defaults from the environment (and ``.env``) the same way for every client.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.licensechain.app"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_WEBHOOK_TOLERANCE = 300


class LicenseChainSettings(BaseSettings):
    """Environment-backed settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_key: Optional[str] = Field(default=None, validation_alias="LICENSECHAIN_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, validation_alias="LICENSECHAIN_BASE_URL")
    timeout: float = Field(default=DEFAULT_TIMEOUT, validation_alias="LICENSECHAIN_TIMEOUT")
    retry_count: int = Field(
        default=DEFAULT_RETRY_COUNT, validation_alias="LICENSECHAIN_RETRIES"
    )
    retry_delay: float = Field(
        default=DEFAULT_RETRY_DELAY, validation_alias="LICENSECHAIN_RETRY_DELAY"
    )

    # Webhook Configuration
    webhook_secret: Optional[str] = Field(
        default=None, validation_alias="LICENSECHAIN_WEBHOOK_SECRET"
    )
    webhook_tolerance: int = Field(
        default=DEFAULT_WEBHOOK_TOLERANCE, validation_alias="LICENSECHAIN_WEBHOOK_TOLERANCE"
    )

    # Logging Configuration
    log_level: str = Field(default="WARNING", validation_alias="LICENSECHAIN_LOG_LEVEL")
    log_format: str = Field(default="console", validation_alias="LICENSECHAIN_LOG_FORMAT")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid_formats = {"console", "json"}
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()


# Global settings instance
_settings: Optional[LicenseChainSettings] = None


def get_settings() -> LicenseChainSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = LicenseChainSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (useful for testing)."""
    global _settings
    _settings = None


class Configuration(BaseModel):
    """Immutable client configuration.

    Attributes:
        api_key: Bearer token sent with every request (required)
        base_url: API root, stored without trailing slash
        timeout: Per-attempt request timeout in seconds
        retry_count: Retries after the first attempt for retryable failures
        retry_delay: Delay before the first retry; doubles on each further retry
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("API key is required")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("Base URL is required")
        return v

    def update(self, **changes: Any) -> "Configuration":
        """Return a new validated configuration with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def with_api_key(self, api_key: str) -> "Configuration":
        return self.update(api_key=api_key)

    def with_base_url(self, base_url: str) -> "Configuration":
        return self.update(base_url=base_url)

    def with_timeout(self, timeout: float) -> "Configuration":
        return self.update(timeout=timeout)

    def with_retry_count(self, retry_count: int) -> "Configuration":
        return self.update(retry_count=retry_count)

    def with_retry_delay(self, retry_delay: float) -> "Configuration":
        return self.update(retry_delay=retry_delay)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Create configuration from a plain mapping, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls.model_validate(known)

    @classmethod
    def from_env(cls, settings: Optional[LicenseChainSettings] = None) -> "Configuration":
        """Create configuration from environment settings.

        Environment variables:
            LICENSECHAIN_API_KEY: Required API key
            LICENSECHAIN_BASE_URL: Optional API root
            LICENSECHAIN_TIMEOUT: Optional timeout in seconds (default: 30)
            LICENSECHAIN_RETRIES: Optional retry count (default: 3)
            LICENSECHAIN_RETRY_DELAY: Optional initial backoff (default: 1.0)

        Raises:
            pydantic.ValidationError: If the API key is missing or a value is invalid
        """
        settings = settings or get_settings()
        return cls(
            api_key=settings.api_key or "",
            base_url=settings.base_url,
            timeout=settings.timeout,
            retry_count=settings.retry_count,
            retry_delay=settings.retry_delay,
        )

    def __repr__(self) -> str:
        return (
            f"Configuration(base_url={self.base_url!r}, timeout={self.timeout}, "
            f"retry_count={self.retry_count}, retry_delay={self.retry_delay})"
        )
