"""
Food lookup service wrapping an external product database client.

The client is any object implementing :class:`ProductLookup`. Whatever it
does (a miss, a malformed payload, a raised exception), callers of
:class:`FoodLookupService` get a ``Result`` and never an exception.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import structlog

from adapters.food_lookup.domain import NormalizedProduct, normalize_product
from insight_core.domain.result import ExternalLookupFailure, Result

logger = structlog.get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 25


class ProductLookup(Protocol):
    """Protocol for product database clients."""

    def fetch_barcode(self, barcode: str) -> Mapping[str, Any] | None:
        """Raw product payload for a barcode, or None when unknown."""
        ...

    def search(self, query: str, country: str | None = None) -> Sequence[Mapping[str, Any]]:
        """Raw product payloads matching free text."""
        ...


class FoodLookupService:
    """
    Normalize product lookups and turn every failure into an explicit result.

    Args:
        client: Product database client
        search_limit: Maximum number of products returned by :meth:`search`
    """

    def __init__(self, client: ProductLookup, search_limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self.client = client
        self.search_limit = search_limit
        self.logger = logger.bind(component="food_lookup", client=type(client).__name__)

    def by_barcode(self, barcode: str) -> Result[NormalizedProduct, ExternalLookupFailure]:
        barcode = barcode.strip()
        if not barcode:
            return Result.err(ExternalLookupFailure(barcode, "empty barcode"))

        try:
            raw = self.client.fetch_barcode(barcode)
            if not raw:
                self.logger.info("barcode_not_found", barcode=barcode)
                return Result.err(ExternalLookupFailure(barcode))
            product = normalize_product(raw, barcode=barcode)
        except Exception as e:
            self.logger.error("barcode_lookup_failed", barcode=barcode, error=str(e))
            return Result.err(ExternalLookupFailure(barcode, str(e) or type(e).__name__))

        self.logger.info("barcode_lookup_succeeded", barcode=barcode, product=product.name)
        return Result.ok(product)

    def search(
        self, query: str, country: str | None = None
    ) -> Result[list[NormalizedProduct], ExternalLookupFailure]:
        """Products matching ``query``; payloads without a name are dropped."""
        query = query.strip()
        if not query:
            return Result.err(ExternalLookupFailure(query, "empty query"))

        try:
            payloads = self.client.search(query, country=country)
            products = [
                normalize_product(raw) for raw in payloads if raw.get("product_name")
            ][: self.search_limit]
        except Exception as e:
            self.logger.error("product_search_failed", query=query, error=str(e))
            return Result.err(ExternalLookupFailure(query, str(e) or type(e).__name__))

        if not products:
            self.logger.info("product_search_empty", query=query, country=country)
            return Result.err(ExternalLookupFailure(query))

        self.logger.info("product_search_succeeded", query=query, count=len(products))
        return Result.ok(products)
