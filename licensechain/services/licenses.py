"""License endpoints."""

from typing import Any, Dict, Mapping, Optional

from ..api.models import Page
from ..logging import get_logger
from ..validation import sanitize_metadata
from .base import BaseService

logger = get_logger(__name__)


class LicenseService(BaseService):
    """Create, inspect and manage licenses.

    Examples:
        >>> license = client.licenses.create(user_id, product_id, {"plan": "pro"})
        >>> client.licenses.validate(license["license_key"])["valid"]
        True
    """

    resource_path = "/licenses"

    def create(
        self,
        user_id: str,
        product_id: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Issue a license for a user and product.

        Args:
            user_id: Owning user
            product_id: Licensed product
            metadata: Optional metadata (string values are HTML-escaped)

        Raises:
            ValidationError: If user_id or product_id is empty
        """
        self._require(user_id, "user_id")
        self._require(product_id, "product_id")

        data = {
            "user_id": user_id,
            "product_id": product_id,
            "metadata": sanitize_metadata(dict(metadata or {})),
        }
        license_ = self._unwrap(self.pipeline.post(self.resource_path, data))
        logger.info("License created", license_id=self._resource_id(license_))
        return license_

    def get(self, license_id: str) -> Dict[str, Any]:
        self._require_uuid(license_id, "license_id")
        return self._unwrap(self.pipeline.get(self._path(license_id)))

    def update(self, license_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        self._require_uuid(license_id, "license_id")
        return self._unwrap(
            self.pipeline.put(self._path(license_id), sanitize_metadata(dict(updates)))
        )

    def delete(self, license_id: str) -> bool:
        self._require_uuid(license_id, "license_id")
        self.pipeline.delete(self._path(license_id))
        logger.info("License deleted", license_id=license_id)
        return True

    def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        user_id: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Page:
        """List licenses, optionally only those of one user.

        Raises:
            ValidationError: If user_id is given but not a UUID
        """
        if user_id is not None:
            self._require_uuid(user_id, "user_id")
        return self._list(
            page, limit, sort_by=sort_by, sort_order=sort_order, filters=filters, user_id=user_id
        )

    def list_user_licenses(
        self, user_id: str, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Page:
        self._require_uuid(user_id, "user_id")
        return self.list(page=page, limit=limit, user_id=user_id)

    def stats(self) -> Dict[str, Any]:
        return self._stats()

    def validate(self, license_key: str, app_id: Optional[str] = None) -> Dict[str, Any]:
        """Validate a license key against the API.

        Returns:
            The raw validation response (``valid``, ``license``, ``user``, ``app``)
        """
        self._require(license_key, "license_key")
        data: Dict[str, Any] = {"license_key": license_key}
        if app_id:
            data["app_id"] = app_id
        return self.pipeline.post(self._path("validate"), data)

    def revoke(self, license_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        self._require_uuid(license_id, "license_id")
        data = {"reason": reason} if reason else None
        response = self.pipeline.patch(self._path(license_id, "revoke"), data)
        logger.info("License revoked", license_id=license_id)
        return response

    def activate(self, license_id: str) -> Dict[str, Any]:
        self._require_uuid(license_id, "license_id")
        return self.pipeline.patch(self._path(license_id, "activate"))

    def extend(self, license_id: str, expires_at: str) -> Dict[str, Any]:
        """Move a license's expiry to ``expires_at`` (ISO-8601)."""
        self._require_uuid(license_id, "license_id")
        self._require(expires_at, "expires_at")
        return self.pipeline.patch(
            self._path(license_id, "extend"), {"expires_at": expires_at}
        )

    def analytics(self, license_id: str) -> Dict[str, Any]:
        self._require_uuid(license_id, "license_id")
        return self._unwrap(self.pipeline.get(self._path(license_id, "analytics")))
