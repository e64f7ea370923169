"""
Base Catalog Client Classes.
Abstract interfaces for the remote catalog and the optional inventory lookup.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from catalog_relay.features.catalog.domain.catalog_entity import CatalogPage


class BaseCatalogClient(ABC):
    """
    One page of the remote catalog per call.

    Implementations raise RemoteUnavailable on transport errors or non-2xx
    statuses and AuthenticationFailed when credentials are rejected.
    """

    @abstractmethod
    def fetch_page(self, cursor: Optional[str] = None, since_id: Optional[int] = None,
                   page_size: int = 250) -> CatalogPage:
        pass

    @abstractmethod
    def count_products(self) -> Optional[int]:
        pass


class BaseInventoryLookup(ABC):
    """
    Live availability per variant id. Ids it cannot resolve are left out of
    the result so callers fall back to the last known inventory quantity.
    """

    @abstractmethod
    def fetch_availability(self, variant_ids: Iterable[int]) -> Dict[int, int]:
        pass
