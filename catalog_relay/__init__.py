"""Shopify catalog relay: paginated catalog retrieval and availability matching."""
from catalog_relay.features.catalog.domain.catalog_errors import (
    AuthenticationFailed,
    CatalogError,
    PartialCatalog,
    RemoteUnavailable,
)

__version__ = "1.0.0"

__all__ = [
    "AuthenticationFailed",
    "CatalogError",
    "PartialCatalog",
    "RemoteUnavailable",
    "__version__",
]
