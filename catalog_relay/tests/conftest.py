import os
import tempfile
from typing import Dict, List, Optional, Sequence

import pytest

# Logging is configured on first get_logger(); keep test runs out of the package log dir.
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='catalog_relay_logs_'))

from catalog_relay.common.base.base_catalog_client import BaseCatalogClient
from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry, CatalogPage, Variant
from catalog_relay.features.catalog.domain.catalog_errors import RemoteUnavailable


def make_variant(vid: int, sku: Optional[str] = None, quantity: int = 0, **kwargs) -> Variant:
    return Variant(id=vid, sku=sku, inventory_quantity=quantity, **kwargs)


def make_entry(eid: int, title: str = "", variants: Sequence[Variant] = (), tags=(), **kwargs) -> CatalogEntry:
    return CatalogEntry(id=eid, title=title or f"Product {eid}", variants=tuple(variants),
                        tags=frozenset(tags), **kwargs)


class FakeCatalogClient(BaseCatalogClient):
    """
    In-memory catalog served in id order.

    `failures` maps a 1-based request number to the exception raised for it.
    """

    def __init__(self, entries: List[CatalogEntry], failures: Optional[Dict[int, Exception]] = None,
                 use_cursor: bool = True):
        self.entries = sorted(entries, key=lambda e: e.id)
        self.failures = failures or {}
        self.use_cursor = use_cursor
        self.calls: List[dict] = []
        self.count_calls = 0

    def fetch_page(self, cursor=None, since_id=None, page_size=250) -> CatalogPage:
        self.calls.append({'cursor': cursor, 'since_id': since_id, 'page_size': page_size})
        failure = self.failures.get(len(self.calls))
        if failure is not None:
            raise failure

        if cursor is not None:
            start = int(cursor)
        elif since_id is not None:
            start = next((i for i, e in enumerate(self.entries) if e.id > since_id), len(self.entries))
        else:
            start = 0

        chunk = self.entries[start:start + page_size]
        end = start + len(chunk)
        next_cursor = str(end) if self.use_cursor and end < len(self.entries) else None
        return CatalogPage(entries=tuple(chunk), next_cursor=next_cursor)

    def count_products(self) -> Optional[int]:
        self.count_calls += 1
        return len(self.entries)


def build_catalog(n: int) -> List[CatalogEntry]:
    return [make_entry(i, f"Product {i}", [make_variant(i * 10, f"SKU-{i}", quantity=1)]) for i in range(1, n + 1)]


@pytest.fixture
def catalog_factory():
    return build_catalog


@pytest.fixture
def remote_error():
    return RemoteUnavailable("Shopify API Error: 503 Service Unavailable", status_code=503)
