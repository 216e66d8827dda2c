"""Product endpoints."""

from typing import Any, Dict, Mapping, Optional

from ..api.models import Page
from ..exceptions import ValidationError
from ..logging import get_logger
from ..validation import is_valid_currency, require_positive, sanitize_metadata
from .base import BaseService

logger = get_logger(__name__)


class ProductService(BaseService):
    """Manage sellable products."""

    resource_path = "/products"

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        price: Optional[float] = None,
        currency: str = "USD",
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a product.

        Args:
            name: Display name
            description: Optional description
            price: Optional price, must be positive when given
            currency: ISO currency code (USD, EUR, GBP, CAD, AUD, JPY, CHF, CNY)
            metadata: Optional metadata (string values are HTML-escaped)

        Raises:
            ValidationError: If name is empty, price is not positive or the
                currency is unsupported
        """
        self._require(name, "name")
        if price is not None:
            require_positive(price, "price")
        if not is_valid_currency(currency):
            raise ValidationError("Invalid currency")

        data = {
            "name": name,
            "description": description,
            "price": price,
            "currency": currency.upper(),
            "metadata": sanitize_metadata(dict(metadata or {})),
        }
        product = self._unwrap(self.pipeline.post(self.resource_path, data))
        logger.info("Product created", product_id=self._resource_id(product))
        return product

    def get(self, product_id: str) -> Dict[str, Any]:
        self._require_uuid(product_id, "product_id")
        return self._unwrap(self.pipeline.get(self._path(product_id)))

    def update(self, product_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        self._require_uuid(product_id, "product_id")
        return self._unwrap(
            self.pipeline.put(self._path(product_id), sanitize_metadata(dict(updates)))
        )

    def delete(self, product_id: str) -> bool:
        self._require_uuid(product_id, "product_id")
        self.pipeline.delete(self._path(product_id))
        logger.info("Product deleted", product_id=product_id)
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
