"""
Catalog Service

Product discovery for the storefront: home page, category pages, search.
Cart lines carry their own product snapshot, so nothing here feeds the
cart engine beyond the CatalogEntry passed to ``add_to_cart``.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from supabase._async.client import AsyncClient

from farmcart.config import get_settings
from farmcart.db import get_supabase
from farmcart.logging import get_logger, sanitize_string_for_logging
from farmcart.services.models import CatalogEntry, MarketplaceStats, ProductCategory
from farmcart.services.repositories import ProductRepository
from farmcart.services.repositories.product_repo import escape_search_term

logger = get_logger(__name__)

MIN_SEARCH_LENGTH = 2


@dataclass
class HomePage:
    """Featured listings plus the marketplace counters."""

    featured: list[CatalogEntry] = field(default_factory=list)
    stats: MarketplaceStats = field(default_factory=MarketplaceStats)


class CatalogService:
    """Read-only catalog operations."""

    def __init__(self, products: ProductRepository, featured_limit: int = 6) -> None:
        self.products = products
        self.featured_limit = featured_limit

    async def home_page(self) -> HomePage:
        featured, stats = await asyncio.gather(
            self.products.get_featured(self.featured_limit),
            self.products.get_marketplace_stats(),
        )
        return HomePage(featured=featured, stats=stats)

    async def browse(self, category: ProductCategory) -> list[CatalogEntry]:
        return await self.products.get_by_category(category)

    async def search(self, query: str) -> list[CatalogEntry]:
        """Search by name/description; queries shorter than two characters return nothing."""
        query = escape_search_term(query or "")
        if len(query) < MIN_SEARCH_LENGTH:
            return []
        logger.debug("Catalog search: %s", sanitize_string_for_logging(query))
        return await self.products.search(query)

    async def get_product(self, product_id: str) -> Optional[CatalogEntry]:
        return await self.products.get_by_id(product_id)


async def create_catalog_service(client: Optional[AsyncClient] = None) -> CatalogService:
    """Build a catalog service over the configured products table."""
    if client is None:
        client = await get_supabase()
    settings = get_settings()
    products = ProductRepository(client, table=settings.products_table)
    return CatalogService(products, featured_limit=settings.featured_limit)
