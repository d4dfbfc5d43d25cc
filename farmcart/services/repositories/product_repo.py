"""Product Repository - catalog browsing."""
import asyncio
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from farmcart.logging import get_logger, sanitize_id_for_logging
from farmcart.services.models import CatalogEntry, MarketplaceStats, ProductCategory
from .base import BaseRepository

logger = get_logger(__name__)

PRODUCT_SELECT = "*, seller:users(*)"
SELLER_ROLES = ["farmer", "meat_seller"]

# Characters that delimit PostgREST filter expressions
_FILTER_RESERVED = re.compile(r'[,()\\"*%]')


def escape_search_term(query: str) -> str:
    """Drop filter syntax characters so a query cannot alter the or_ expression."""
    return " ".join(_FILTER_RESERVED.sub(" ", query).split())


class ProductRepository(BaseRepository):
    """Product database operations."""

    def __init__(self, client, table: str = "products") -> None:
        super().__init__(client)
        self.table = table

    async def get_featured(self, limit: int = 6) -> List[CatalogEntry]:
        """Top-rated available products for the home page."""
        result = await self._execute(
            self.client.table(self.table)
            .select(PRODUCT_SELECT)
            .eq("is_available", True)
            .order("rating", desc=True)
            .limit(limit),
            "Failed to load featured products",
        )
        return self._parse_all(result.data)

    async def get_by_category(self, category: ProductCategory) -> List[CatalogEntry]:
        """Available products in one category, newest first."""
        result = await self._execute(
            self.client.table(self.table)
            .select(PRODUCT_SELECT)
            .eq("category", category)
            .eq("is_available", True)
            .order("created_at", desc=True),
            "Failed to load category",
        )
        return self._parse_all(result.data)

    async def get_by_id(self, product_id: str) -> Optional[CatalogEntry]:
        result = await self._execute(
            self.client.table(self.table).select(PRODUCT_SELECT).eq("id", product_id).limit(1),
            "Failed to load product",
        )
        if not result.data:
            return None
        products = self._parse_all(result.data)
        return products[0] if products else None

    async def search(self, query: str) -> List[CatalogEntry]:
        """Search available products by name or description."""
        term = escape_search_term(query)
        if not term:
            return []
        result = await self._execute(
            self.client.table(self.table)
            .select(PRODUCT_SELECT)
            .or_(f"name.ilike.%{term}%,description.ilike.%{term}%")
            .eq("is_available", True),
            "Failed to search products",
        )
        return self._parse_all(result.data)

    async def get_marketplace_stats(self) -> MarketplaceStats:
        """Count products, sellers and orders concurrently."""
        products, sellers, orders = await asyncio.gather(
            self._execute(
                self.client.table(self.table).select("id", count="exact"),
                "Failed to count products",
            ),
            self._execute(
                self.client.table("users").select("id", count="exact").in_("role", SELLER_ROLES),
                "Failed to count sellers",
            ),
            self._execute(
                self.client.table("orders").select("id", count="exact"),
                "Failed to count orders",
            ),
        )
        return MarketplaceStats(
            total_products=products.count or 0,
            active_sellers=sellers.count or 0,
            total_orders=orders.count or 0,
        )

    @staticmethod
    def _parse_all(rows: list[dict[str, Any]] | None) -> List[CatalogEntry]:
        products = []
        for row in rows or []:
            try:
                products.append(CatalogEntry.model_validate(row))
            except ValidationError:
                # Skip rows that fail validation
                logger.warning("Skipping malformed product %s", sanitize_id_for_logging(row.get("id")))
        return products
