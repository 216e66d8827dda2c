"""Base class for resource services.

Each service is a thin, validated façade over one group of API endpoints.
Validation happens before any request is sent, so invalid input never
reaches the network.
"""

from typing import Any, Dict, Mapping, Optional

from ..api.models import Page
from ..api.pipeline import RequestPipeline
from ..validation import require_not_empty, require_uuid, validate_pagination


class BaseService:
    """Shared helpers for resource services.

    Attributes:
        pipeline: Request pipeline shared with the owning client
    """

    #: Collection path, e.g. ``/licenses``
    resource_path: str = ""

    def __init__(self, pipeline: RequestPipeline):
        self.pipeline = pipeline

    def _path(self, *parts: str) -> str:
        return "/".join([self.resource_path, *parts])

    @staticmethod
    def _require(value: Optional[str], field_name: str) -> str:
        return require_not_empty(value, field_name)

    @staticmethod
    def _require_uuid(value: Optional[str], field_name: str) -> str:
        return require_uuid(value, field_name)

    @staticmethod
    def _unwrap(response: Dict[str, Any]) -> Any:
        """Return the ``data`` envelope of a response when present."""
        if "data" in response:
            return response["data"]
        return response

    @staticmethod
    def _resource_id(resource: Any) -> Optional[str]:
        return resource.get("id") if isinstance(resource, dict) else None

    def _list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        **extra: Any,
    ) -> Page:
        """GET the collection with clamped pagination and pass-through filters."""
        page, limit = validate_pagination(page, limit)
        params: Dict[str, Any] = dict(filters or {})
        params.update({k: v for k, v in extra.items() if v is not None})
        params.update({"page": page, "limit": limit})
        if sort_by:
            params["sort_by"] = sort_by
        if sort_order:
            params["sort_order"] = sort_order

        response = self.pipeline.get(self.resource_path, params)
        return Page.from_response(response, page, limit)

    def _stats(self) -> Dict[str, Any]:
        return self._unwrap(self.pipeline.get(self._path("stats")))
