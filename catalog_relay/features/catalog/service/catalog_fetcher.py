"""
Catalog Fetcher.

Walks the remote catalog page by page and returns every entry as one list.
Two pagination contracts are supported:

- ``cursor``: the remote hands back an opaque token for the next page
  (Shopify ``Link: <...page_info=...>; rel="next"``). Stops when no token
  comes back.
- ``since_id``: each request asks for entries after the highest id seen in
  the previous page. The total product count is read up front and the loop
  stops once that many entries have been collected.

Both modes also stop on an empty or short page, or when the page cap is hit. Every
``throttle_every`` pages the loop sleeps ``throttle_seconds`` before the next
request to stay under the remote rate limit.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Hashable, List, Optional

from catalog_relay.common.base.base_catalog_client import BaseCatalogClient
from catalog_relay.common.base.base_service import BaseService
from catalog_relay.config.env_config import PAGINATION_MODES, PARTIAL_POLICIES, RelaySettings
from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry
from catalog_relay.features.catalog.domain.catalog_errors import PartialCatalog, RemoteUnavailable
from catalog_relay.services.system.cache_service import TTLCache
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 250


@dataclass
class FetchReport:
    pages_requested: int = 0
    entry_count: int = 0
    total_count: Optional[int] = None
    complete: bool = True
    reason: Optional[str] = None
    from_cache: bool = False
    duration_ms: float = 0.0


@dataclass
class CatalogFetchResult:
    entries: List[CatalogEntry] = field(default_factory=list)
    report: FetchReport = field(default_factory=FetchReport)


class CatalogFetcher(BaseService):
    def __init__(
        self,
        client: BaseCatalogClient,
        page_size: int = MAX_PAGE_SIZE,
        pagination: str = "cursor",
        throttle_every: int = 10,
        throttle_seconds: float = 1.0,
        partial_policy: str = "raise",
        cache: Optional[TTLCache] = None,
        cache_key: Hashable = "catalog",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if pagination not in PAGINATION_MODES:
            raise ValueError(f"Unknown pagination mode: {pagination!r}")
        if partial_policy not in PARTIAL_POLICIES:
            raise ValueError(f"Unknown partial policy: {partial_policy!r}")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

        self.client = client
        self.page_size = page_size
        self.pagination = pagination
        self.throttle_every = throttle_every
        self.throttle_seconds = throttle_seconds
        self.partial_policy = partial_policy
        self.cache = cache
        self.cache_key = cache_key
        self._sleep = sleep

    @classmethod
    def from_settings(cls, client: BaseCatalogClient, settings: RelaySettings,
                      cache: Optional[TTLCache] = None,
                      sleep: Callable[[float], None] = time.sleep) -> "CatalogFetcher":
        return cls(
            client,
            page_size=settings.page_size,
            pagination=settings.pagination,
            throttle_every=settings.throttle_every,
            throttle_seconds=settings.throttle_seconds,
            partial_policy=settings.partial_policy,
            cache=cache,
            cache_key=("catalog", settings.store_url, settings.pagination, settings.page_size),
            sleep=sleep,
        )

    def fetch_full_catalog(self, page_cap: Optional[int] = None) -> List[CatalogEntry]:
        """
        Fetch every catalog entry.

        Raises:
            AuthenticationFailed: credentials rejected (always fatal)
            RemoteUnavailable: the first page failed
            PartialCatalog: under the "raise" policy, a later page failed or the page cap
                was hit before the end; carries the entries fetched so far
        """
        return self.fetch_catalog_report(page_cap).entries

    def fetch_catalog_report(self, page_cap: Optional[int] = None) -> CatalogFetchResult:
        """Same as fetch_full_catalog, also returning how the fetch went."""
        if page_cap is not None and page_cap < 1:
            raise ValueError("page_cap must be >= 1")

        if self.cache is not None and self.cache.is_enabled():
            cached = self.cache.get(self.cache_key)
            if cached is not None:
                logger.debug("Catalog served from cache", extra={"entries": len(cached)})
                return CatalogFetchResult(
                    entries=list(cached),
                    report=FetchReport(entry_count=len(cached), from_cache=True),
                )

        started = time.monotonic()
        report = FetchReport()
        entries: List[CatalogEntry] = []

        if self.pagination == "since_id":
            report.total_count = self.client.count_products()

        cursor: Optional[str] = None
        since_id: Optional[int] = None

        while True:
            if page_cap is not None and report.pages_requested >= page_cap:
                report.complete = False
                report.reason = f"page cap of {page_cap} reached"
                break

            if report.pages_requested and self.throttle_every and report.pages_requested % self.throttle_every == 0:
                logger.debug("Pausing between catalog pages", extra={
                    "pages_requested": report.pages_requested,
                    "delay_seconds": self.throttle_seconds,
                })
                self._sleep(self.throttle_seconds)

            try:
                page = self.client.fetch_page(cursor=cursor, since_id=since_id, page_size=self.page_size)
            except RemoteUnavailable as exc:
                report.pages_requested += 1
                if not entries:
                    logger.error("First catalog page request failed", extra={
                        "status_code": exc.status_code,
                    })
                    raise
                report.complete = False
                report.reason = f"page {report.pages_requested} failed: {exc}"
                if self.partial_policy == "raise":
                    logger.error("Catalog page request failed", extra={
                        "page": report.pages_requested,
                        "status_code": exc.status_code,
                        "accumulated": len(entries),
                    })
                    raise PartialCatalog(report.reason, entries, report.pages_requested) from exc
                break

            report.pages_requested += 1
            logger.debug("Catalog page fetched", extra={
                "page": report.pages_requested,
                "page_entries": len(page.entries),
            })

            if not page.entries:
                break
            entries.extend(page.entries)

            if report.total_count is None and page.total_count is not None:
                report.total_count = page.total_count
            if report.total_count is not None and len(entries) >= report.total_count:
                break
            if len(page.entries) < self.page_size:
                break

            if self.pagination == "cursor":
                if not page.next_cursor:
                    break
                if page.next_cursor == cursor:
                    report.complete = False
                    report.reason = "remote repeated the same cursor"
                    break
                cursor = page.next_cursor
            else:
                next_since = max(e.id for e in page.entries)
                if since_id is not None and next_since <= since_id:
                    report.complete = False
                    report.reason = "remote returned no newer identifiers"
                    break
                since_id = next_since

        report.entry_count = len(entries)
        report.duration_ms = self.elapsed_ms(started)

        if not report.complete:
            if self.partial_policy == "raise":
                logger.error("Catalog fetch incomplete", extra={
                    "reason": report.reason,
                    "pages_requested": report.pages_requested,
                    "entries": report.entry_count,
                })
                raise PartialCatalog(report.reason or "incomplete", entries, report.pages_requested)
            logger.warning("Returning partial catalog", extra={
                "reason": report.reason,
                "pages_requested": report.pages_requested,
                "entries": report.entry_count,
            })
        else:
            logger.info("Catalog fetched", extra={
                "pages_requested": report.pages_requested,
                "entries": report.entry_count,
                "duration_ms": report.duration_ms,
            })
            if self.cache is not None and self.cache.is_enabled():
                self.cache.set(self.cache_key, tuple(entries))

        return CatalogFetchResult(entries=entries, report=report)
