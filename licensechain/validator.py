"""License validation helpers for applications enforcing their licenses.

Unlike the services, these helpers never raise API errors: a failed lookup is
reported as ``{"valid": False, "error": ...}`` (or a falsy/None answer), so a
licensed application can gate features with simple checks.
"""

import math
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .client import LicenseChainClient
from .exceptions import LicenseChainError
from .logging import get_logger
from .validation import missing_items
from .webhooks.replay import parse_timestamp

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def _as_count(value: Any) -> Optional[int]:
    """Integer value of a count field, or None when it is not a whole number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


class LicenseValidator:
    """Convenience checks on top of ``client.licenses.validate``."""

    def __init__(self, client: LicenseChainClient):
        self.client = client

    def validate_license(self, license_key: str, app_id: Optional[str] = None) -> Dict[str, Any]:
        """Validate a key, returning the API response or an invalid record."""
        try:
            return self.client.licenses.validate(license_key, app_id)
        except LicenseChainError as e:
            logger.info("License validation failed", kind=e.kind.value, error=e.message)
            return {"valid": False, "error": e.message}

    def is_valid(self, license_key: str, app_id: Optional[str] = None) -> bool:
        return bool(self.validate_license(license_key, app_id).get("valid", False))

    def get_license_info(
        self, license_key: str, app_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        result = self.validate_license(license_key, app_id)
        return result if result.get("valid") else None

    def is_expired(self, license_key: str, app_id: Optional[str] = None) -> bool:
        """Invalid or unknown licenses count as expired; no expiry means never."""
        result = self.validate_license(license_key, app_id)
        license_ = result.get("license")
        if not result.get("valid") or not isinstance(license_, dict):
            return True
        expires_at = license_.get("expires_at")
        if not expires_at:
            return False
        try:
            return parse_timestamp(expires_at) < time.time()
        except LicenseChainError:
            return True

    def days_until_expiration(
        self, license_key: str, app_id: Optional[str] = None
    ) -> Optional[int]:
        """Whole days left (rounded up, never negative), None if unknown."""
        result = self.validate_license(license_key, app_id)
        license_ = result.get("license")
        if not result.get("valid") or not isinstance(license_, dict):
            return None
        expires_at = license_.get("expires_at")
        if not expires_at:
            return None
        try:
            remaining = parse_timestamp(expires_at) - time.time()
        except LicenseChainError:
            return None
        return max(0, math.ceil(remaining / SECONDS_PER_DAY))

    def validate_licenses(
        self, license_keys: Iterable[str], app_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return [self.validate_license(key, app_id) for key in license_keys]

    def validate_with_rules(
        self,
        license_key: str,
        rules: Mapping[str, Any],
        app_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Validate a key and apply local rules on top of the API verdict.

        Supported rules: ``max_usage``, ``allowed_features``,
        ``required_features``, ``allowed_domains``, ``allowed_ips``. A rule is
        skipped when the license lacks the field it inspects.
        """
        result = self.validate_license(license_key, app_id)
        if not result.get("valid") or not rules:
            return result

        license_ = result.get("license") or {}
        features = license_.get("features")
        metadata = license_.get("metadata") or {}

        def reject(error: str) -> Dict[str, Any]:
            return {**result, "valid": False, "error": error}

        usage_count = _as_count(license_.get("usage_count"))
        max_usage = _as_count(rules.get("max_usage"))
        if usage_count is not None and max_usage is not None:
            if usage_count > max_usage:
                return reject("Usage limit exceeded")

        if "allowed_features" in rules and features is not None:
            invalid = missing_items(list(features), list(rules["allowed_features"]))
            if invalid:
                return reject(f"Invalid features: {', '.join(invalid)}")

        if "required_features" in rules and features is not None:
            missing = missing_items(list(rules["required_features"]), list(features))
            if missing:
                return reject(f"Missing required features: {', '.join(missing)}")

        domain = metadata.get("domain")
        if "allowed_domains" in rules and domain is not None:
            if domain not in rules["allowed_domains"]:
                return reject(f"Domain not allowed: {domain}")

        ip_address = metadata.get("ip_address")
        if "allowed_ips" in rules and ip_address is not None:
            if ip_address not in rules["allowed_ips"]:
                return reject(f"IP address not allowed: {ip_address}")

        return result

    def has_feature(self, license_key: str, feature: str, app_id: Optional[str] = None) -> bool:
        return feature in self.get_features(license_key, app_id)

    def get_usage_count(self, license_key: str, app_id: Optional[str] = None) -> Optional[int]:
        result = self.validate_license(license_key, app_id)
        if not result.get("valid"):
            return None
        return (result.get("license") or {}).get("usage_count", 0)

    def get_metadata(
        self, license_key: str, app_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        result = self.validate_license(license_key, app_id)
        if not result.get("valid"):
            return None
        return (result.get("license") or {}).get("metadata") or {}

    def get_features(self, license_key: str, app_id: Optional[str] = None) -> List[str]:
        result = self.validate_license(license_key, app_id)
        if not result.get("valid"):
            return []
        return list((result.get("license") or {}).get("features") or [])

    def get_user_info(
        self, license_key: str, app_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        result = self.validate_license(license_key, app_id)
        if not result.get("valid"):
            return None
        user = result.get("user") or {}
        return {"email": user.get("email"), "name": user.get("name"), "id": user.get("id")}

    def get_app_info(
        self, license_key: str, app_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        result = self.validate_license(license_key, app_id)
        if not result.get("valid"):
            return None
        app = result.get("app") or {}
        return {"name": app.get("name"), "id": app.get("id")}
