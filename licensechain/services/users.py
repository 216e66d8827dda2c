"""User endpoints."""

from typing import Any, Dict, Mapping, Optional

from ..api.models import Page
from ..exceptions import ValidationError
from ..logging import get_logger
from ..validation import is_valid_email, sanitize_metadata
from .base import BaseService

logger = get_logger(__name__)


class UserService(BaseService):
    """Manage end users of licensed products."""

    resource_path = "/users"

    def create(
        self,
        email: str,
        name: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a user.

        Raises:
            ValidationError: If the email is empty or malformed
        """
        self._require(email, "email")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")

        data = {
            "email": email,
            "name": name,
            "metadata": sanitize_metadata(dict(metadata or {})),
        }
        user = self._unwrap(self.pipeline.post(self.resource_path, data))
        logger.info("User created", user_id=self._resource_id(user))
        return user

    def get(self, user_id: str) -> Dict[str, Any]:
        self._require_uuid(user_id, "user_id")
        return self._unwrap(self.pipeline.get(self._path(user_id)))

    def update(self, user_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        self._require_uuid(user_id, "user_id")
        return self._unwrap(
            self.pipeline.put(self._path(user_id), sanitize_metadata(dict(updates)))
        )

    def delete(self, user_id: str) -> bool:
        self._require_uuid(user_id, "user_id")
        self.pipeline.delete(self._path(user_id))
        logger.info("User deleted", user_id=user_id)
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
