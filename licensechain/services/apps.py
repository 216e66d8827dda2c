"""Application endpoints."""

from typing import Any, Dict, Mapping, Optional

from ..api.models import Page
from ..logging import get_logger
from ..validation import sanitize_metadata
from .base import BaseService

logger = get_logger(__name__)


class ApplicationService(BaseService):
    """Manage applications that consume licenses."""

    resource_path = "/apps"

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        self._require(name, "name")
        data = {
            "name": name,
            "description": description,
            "metadata": sanitize_metadata(dict(metadata or {})),
        }
        app = self._unwrap(self.pipeline.post(self.resource_path, data))
        logger.info("Application created", app_id=self._resource_id(app))
        return app

    def get(self, app_id: str) -> Dict[str, Any]:
        self._require_uuid(app_id, "app_id")
        return self._unwrap(self.pipeline.get(self._path(app_id)))

    def update(self, app_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Partially update an application (PATCH)."""
        self._require_uuid(app_id, "app_id")
        return self._unwrap(
            self.pipeline.patch(self._path(app_id), sanitize_metadata(dict(updates)))
        )

    def delete(self, app_id: str) -> bool:
        self._require_uuid(app_id, "app_id")
        self.pipeline.delete(self._path(app_id))
        logger.info("Application deleted", app_id=app_id)
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

    def regenerate_api_key(self, app_id: str) -> Dict[str, Any]:
        """Rotate the application's API key. The old key stops working immediately."""
        self._require_uuid(app_id, "app_id")
        response = self.pipeline.post(self._path(app_id, "regenerate-key"))
        logger.info("Application API key regenerated", app_id=app_id)
        return self._unwrap(response)
