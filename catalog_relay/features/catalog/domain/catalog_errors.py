"""
Errors raised while talking to the remote catalog.
"""
from typing import List, Optional


class CatalogError(Exception):
    """Base class for catalog retrieval errors."""


class RemoteUnavailable(CatalogError):
    """Transport failure or non-success status from the catalog API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationFailed(CatalogError):
    """The remote rejected the configured credentials."""

    def __init__(self, message: str = "Shopify rejected the access token", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PartialCatalog(CatalogError):
    """The fetch loop stopped before the catalog was exhausted."""

    def __init__(self, reason: str, entries: List, pages_fetched: int):
        super().__init__(f"Catalog incomplete after {pages_fetched} page(s): {reason}")
        self.reason = reason
        self.entries = entries
        self.pages_fetched = pages_fetched
