"""Analytics endpoints."""

from typing import Any, Dict, Optional

from ..validation import validate_date_range
from .base import BaseService


class AnalyticsService(BaseService):
    """Read aggregate analytics and usage statistics."""

    resource_path = "/analytics"

    def get(
        self,
        app_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        metric: Optional[str] = None,
        period: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch analytics, optionally scoped to an app and a date range.

        Raises:
            ValidationError: If app_id is not a UUID or start_date is after end_date
        """
        if app_id is not None:
            self._require_uuid(app_id, "app_id")
        if start_date and end_date:
            validate_date_range(start_date, end_date)

        params = {
            "app_id": app_id,
            "start_date": start_date,
            "end_date": end_date,
            "metric": metric,
            "period": period,
        }
        return self.pipeline.get(self.resource_path, params)

    def usage(
        self,
        period: str = "30d",
        app_id: Optional[str] = None,
        granularity: Optional[str] = None,
    ) -> Dict[str, Any]:
        if app_id is not None:
            self._require_uuid(app_id, "app_id")
        params = {"period": period, "app_id": app_id, "granularity": granularity}
        return self.pipeline.get(self._path("usage"), params)
