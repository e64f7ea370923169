"""Shopify Admin REST client used as the remote catalog source."""
from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from catalog_relay.common.base.base_catalog_client import BaseCatalogClient, BaseInventoryLookup
from catalog_relay.common.base.base_service import BaseService
from catalog_relay.config.env_config import RelaySettings
from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry, CatalogPage
from catalog_relay.features.catalog.domain.catalog_errors import AuthenticationFailed, RemoteUnavailable
from catalog_relay.features.catalog.mapper.catalog_mapper import from_shopify_products
from catalog_relay.services.system.logger_service import get_logger, log_remote_call

logger = get_logger(__name__)

USER_AGENT = "CatalogRelay/1.0"
PRODUCT_FIELDS = "id,title,vendor,tags,handle,variants,image,images"
INVENTORY_BATCH_SIZE = 50
INVENTORY_PAGE_SIZE = 250


def _build_session(retries: int) -> requests.Session:
    session = requests.Session()
    if retries > 0:
        # 429s and gateway errors are retried by the transport, honoring Retry-After
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        session.mount("https://", HTTPAdapter(max_retries=retry))
    return session


class ShopifyCatalogClient(BaseService, BaseCatalogClient):
    """Thin wrapper around the products, shop and inventory endpoints."""

    def __init__(self, settings: RelaySettings, session: Optional[requests.Session] = None, retries: int = 2) -> None:
        self.settings = settings
        self.base_url = settings.api_base_url
        self.session = session or _build_session(retries)

    def _headers(self) -> Dict[str, str]:
        return {
            'X-Shopify-Access-Token': self.settings.access_token,
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        }

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        if not self.settings.has_credentials:
            raise AuthenticationFailed("SHOPIFY_STORE_URL and SHOPIFY_ACCESS_TOKEN must be set")
        url = f"{self.base_url}/{path}"
        started = time.monotonic()
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("Shopify request failed", extra={"path": path, "error": str(exc)})
            raise RemoteUnavailable(f"Shopify request failed: {exc}") from exc

        status = response.status_code
        log_remote_call(logger, method, path, status=status, duration_ms=self.elapsed_ms(started))

        if status in (401, 403):
            raise AuthenticationFailed(f"Shopify API Error: {status} {response.reason}", status_code=status)
        if not 200 <= status < 300:
            raise RemoteUnavailable(f"Shopify API Error: {status} {response.reason}", status_code=status)
        return response

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteUnavailable("Shopify returned a non-JSON body", status_code=response.status_code) from exc
        if not isinstance(data, dict):
            raise RemoteUnavailable("Shopify returned an unexpected body", status_code=response.status_code)
        return data

    @staticmethod
    def _next_page_info(response: requests.Response) -> Optional[str]:
        link = (response.links or {}).get('next') or {}
        url = link.get('url')
        if not url:
            return None
        values = parse_qs(urlparse(url).query).get('page_info')
        return values[0] if values else None

    def fetch_page(self, cursor: Optional[str] = None, since_id: Optional[int] = None,
                   page_size: int = 250) -> CatalogPage:
        params: Dict[str, Any] = {'limit': page_size, 'fields': PRODUCT_FIELDS}
        if cursor:
            # page_info requests may not repeat any other filter
            params['page_info'] = cursor
        elif since_id is not None:
            params['since_id'] = since_id

        response = self._request('GET', 'products.json', params)
        data = self._json(response)
        entries = from_shopify_products(data.get('products') or [])
        return CatalogPage(entries=tuple(entries), next_cursor=self._next_page_info(response))

    def count_products(self) -> Optional[int]:
        data = self._json(self._request('GET', 'products/count.json'))
        count = data.get('count')
        return int(count) if count is not None else None

    def test_connection(self) -> Dict[str, Any]:
        """Fetch shop.json; raises AuthenticationFailed for a bad token."""
        data = self._json(self._request('GET', 'shop.json'))
        shop = data.get('shop') or {}
        logger.info("Shopify connection verified", extra={"shop": shop.get('myshopify_domain') or shop.get('name')})
        return shop

    def find_by_title(self, title: str, limit: int = 1) -> List[CatalogEntry]:
        data = self._json(self._request('GET', 'products.json', {'title': title, 'limit': limit, 'fields': PRODUCT_FIELDS}))
        return from_shopify_products(data.get('products') or [])

    def inventory_levels(self, inventory_item_ids: List[int]) -> List[Dict[str, Any]]:
        """Every level (one per item and location) for the given items, following rel="next" links."""
        params: Dict[str, Any] = {
            'inventory_item_ids': ','.join(str(i) for i in inventory_item_ids),
            'limit': INVENTORY_PAGE_SIZE,
        }
        levels: List[Dict[str, Any]] = []
        seen_cursors = set()
        while True:
            response = self._request('GET', 'inventory_levels.json', params)
            levels.extend(self._json(response).get('inventory_levels') or [])

            page_info = self._next_page_info(response)
            if not page_info:
                return levels
            if page_info in seen_cursors:
                raise RemoteUnavailable("Shopify repeated an inventory_levels cursor")
            seen_cursors.add(page_info)
            # page_info requests may not repeat any other filter
            params = {'limit': INVENTORY_PAGE_SIZE, 'page_info': page_info}


class ShopifyInventoryLookup(BaseInventoryLookup):
    """Sums `available` over every location for each variant's inventory item."""

    def __init__(self, client: ShopifyCatalogClient, variant_items: Dict[int, int]) -> None:
        self.client = client
        self.variant_items = dict(variant_items)

    @classmethod
    def for_entries(cls, client: ShopifyCatalogClient, entries: Iterable[CatalogEntry]) -> "ShopifyInventoryLookup":
        variant_items = {
            v.id: v.inventory_item_id
            for entry in entries
            for v in entry.variants
            if v.inventory_item_id is not None
        }
        return cls(client, variant_items)

    def fetch_availability(self, variant_ids: Iterable[int]) -> Dict[int, int]:
        item_to_variant: Dict[int, int] = {}
        for vid in variant_ids:
            item_id = self.variant_items.get(vid)
            if item_id is not None:
                item_to_variant[item_id] = vid

        item_ids = list(item_to_variant)
        totals: Dict[int, int] = {}
        for start in range(0, len(item_ids), INVENTORY_BATCH_SIZE):
            batch = item_ids[start:start + INVENTORY_BATCH_SIZE]
            for level in self.client.inventory_levels(batch):
                item_id = level.get('inventory_item_id')
                if item_id not in item_to_variant:
                    continue
                totals[item_id] = totals.get(item_id, 0) + int(level.get('available') or 0)

        logger.debug("Inventory levels fetched", extra={
            "requested": len(item_ids),
            "resolved": len(totals),
        })
        return {item_to_variant[item_id]: qty for item_id, qty in totals.items()}
