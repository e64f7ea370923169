"""
Availability Service.

fetch -> match -> (optional) live inventory refresh, run sequentially per call.
"""
from typing import Callable, Iterable, List, Optional

from catalog_relay.common.base.base_catalog_client import BaseInventoryLookup
from catalog_relay.common.base.base_service import BaseService
from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry
from catalog_relay.features.catalog.domain.catalog_errors import RemoteUnavailable
from catalog_relay.features.catalog.service.catalog_fetcher import CatalogFetcher
from catalog_relay.features.matching.mapper.match_mapper import to_query_records
from catalog_relay.features.matching.service.matcher import AvailabilityMatcher, MatchResult
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

InventoryFactory = Callable[[List[CatalogEntry]], BaseInventoryLookup]


class AvailabilityService(BaseService):
    def __init__(self, fetcher: CatalogFetcher, matcher: Optional[AvailabilityMatcher] = None,
                 inventory_factory: Optional[InventoryFactory] = None,
                 default_page_cap: Optional[int] = None):
        self.fetcher = fetcher
        self.matcher = matcher or AvailabilityMatcher()
        self.inventory_factory = inventory_factory
        self.default_page_cap = default_page_cap

    def fetch_full_catalog(self, page_cap: Optional[int] = None) -> List[CatalogEntry]:
        return self.fetcher.fetch_full_catalog(page_cap or self.default_page_cap)

    def match_availability(self, query_records: Iterable, page_cap: Optional[int] = None) -> List[MatchResult]:
        """
        Match uploaded rows against the full catalog.

        Args:
            query_records: QueryRecord objects, QueryItemRequest models or {"name", "sku"} dicts
            page_cap: Maximum catalog pages to request (falls back to the configured cap)

        Returns:
            One MatchResult per input row, in input order
        """
        queries = to_query_records(query_records)
        entries = self.fetch_full_catalog(page_cap)
        results = self.matcher.match(entries, queries)

        if self.inventory_factory is None:
            return results

        variant_ids = {
            vid
            for result in results if result.matched is not None
            for vid in result.matched.variant_ids
        }
        if not variant_ids:
            return results

        try:
            availability = self.inventory_factory(entries).fetch_availability(variant_ids)
        except RemoteUnavailable as exc:
            # Totals keep the inventory quantities that came with the catalog
            logger.warning("Live inventory lookup failed; using catalog quantities", extra={
                "variants": len(variant_ids),
                "error": str(exc),
            })
            return results

        return self.matcher.apply_availability(results, availability)
