"""API response models for structured return types."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field


class Page(BaseModel):
    """One page of a list endpoint.

    Attributes:
        data: Resources on this page
        total: Total number of resources across all pages
        page: 1-based page number
        limit: Page size used for the request
    """

    data: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = Field(0, ge=0, description="Total resources across all pages")
    page: int = Field(1, ge=1, description="1-based page number")
    limit: int = Field(20, ge=1, le=100, description="Page size")

    @classmethod
    def from_response(cls, response: Mapping[str, Any], page: int, limit: int) -> Page:
        """Build a page from a list response, falling back to the requested paging."""
        data = response.get("data") or []
        return cls(
            data=data,
            total=response.get("total", len(data)),
            page=response.get("page", page),
            limit=response.get("limit", limit),
        )

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
