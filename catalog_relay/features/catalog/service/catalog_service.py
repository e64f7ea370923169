"""
Catalog Service.

Read-only helpers on top of the full catalog: tag listings, title checks and
a SKU index.
"""
from typing import Any, Dict, Iterable, List, Optional

from catalog_relay.common.base.base_service import BaseService
from catalog_relay.features.catalog.mapper.catalog_mapper import to_sku_index_row
from catalog_relay.features.catalog.service.catalog_fetcher import CatalogFetcher
from catalog_relay.features.matching.service.matcher import normalize_name
from catalog_relay.services.shopify.shopify_client import ShopifyCatalogClient
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)


class CatalogService(BaseService):
    def __init__(self, client: ShopifyCatalogClient, fetcher: CatalogFetcher,
                 default_page_cap: Optional[int] = None):
        self.client = client
        self.fetcher = fetcher
        self.default_page_cap = default_page_cap

    def test_connection(self) -> Dict[str, Any]:
        return self.client.test_connection()

    def names_for_tag(self, tag: str, page_cap: Optional[int] = None) -> List[str]:
        """Sorted unique titles of products whose tags mention `tag` (case-insensitive)."""
        needle = (tag or '').strip().lower()
        if not needle:
            raise ValueError("tag is required")

        entries = self.fetcher.fetch_full_catalog(page_cap or self.default_page_cap)
        names = {
            entry.title
            for entry in entries
            if entry.title and any(needle in t.lower() for t in entry.tags)
        }
        logger.info("Products listed for tag", extra={"tag": needle, "count": len(names)})
        return sorted(names)

    def title_exists(self, name: str) -> bool:
        """Ask the remote for a product with this exact title."""
        name = (name or '').strip()
        if not name:
            raise ValueError("name is required")
        wanted = normalize_name(name)
        # The title filter on products.json is a loose match; confirm it locally
        return any(normalize_name(e.title) == wanted for e in self.client.find_by_title(name, limit=5))

    def variants_by_sku(self, skus: Optional[Iterable[str]] = None,
                        page_cap: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
        """
        Index variants by SKU. With `skus`, only those SKUs are kept.
        When two variants share a SKU the later one in catalog order wins.
        """
        wanted = {s for s in (skus or []) if s}
        entries = self.fetcher.fetch_full_catalog(page_cap or self.default_page_cap)

        index: Dict[str, Dict[str, Any]] = {}
        for entry in entries:
            for variant in entry.variants:
                if not variant.sku:
                    continue
                if wanted and variant.sku not in wanted:
                    continue
                index[variant.sku] = to_sku_index_row(entry, variant)

        logger.info("SKU index built", extra={"requested": len(wanted), "found": len(index)})
        return index
