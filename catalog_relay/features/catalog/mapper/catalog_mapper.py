"""
Catalog Mapper.

Remote payloads are validated here once; the rest of the package only sees
CatalogEntry / Variant.
"""
from typing import Any, Dict, List

from pydantic import ValidationError

from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry, Variant
from catalog_relay.schemas.catalog_schemas import ShopifyProductPayload, ShopifyVariantPayload
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

def to_variant(payload: ShopifyVariantPayload) -> Variant:
    return Variant(
        id=payload.id,
        sku=payload.sku,
        price=payload.price,
        option_a=payload.option1,
        option_b=payload.option2,
        inventory_quantity=payload.inventory_quantity,
        inventory_item_id=payload.inventory_item_id,
        inventory_policy=payload.inventory_policy,
    )

def to_catalog_entry(payload: ShopifyProductPayload) -> CatalogEntry:
    return CatalogEntry(
        id=payload.id,
        title=payload.title,
        vendor=payload.vendor,
        tags=frozenset(payload.tags),
        variants=tuple(to_variant(v) for v in payload.variants),
        handle=payload.handle,
        image_url=payload.image_url,
    )

def from_shopify_products(raw_products: List[Dict[str, Any]]) -> List[CatalogEntry]:
    """Map a `products` array, skipping records the schema rejects."""
    entries: List[CatalogEntry] = []
    for raw in raw_products or []:
        try:
            entries.append(to_catalog_entry(ShopifyProductPayload.model_validate(raw)))
        except ValidationError as e:
            logger.warning("Skipping malformed product payload", extra={
                "product_id": raw.get('id') if isinstance(raw, dict) else None,
                "error_count": e.error_count(),
            })
    return entries

def to_entry_dict(entry: CatalogEntry) -> Dict[str, Any]:
    return {
        'id': entry.id,
        'title': entry.title,
        'vendor': entry.vendor,
        'handle': entry.handle,
        'tags': sorted(entry.tags),
        'image': entry.image_url,
        'variants': [to_variant_dict(v) for v in entry.variants],
    }

def to_variant_dict(variant: Variant) -> Dict[str, Any]:
    return {
        'id': variant.id,
        'sku': variant.sku,
        'price': variant.price,
        'option1': variant.option_a,
        'option2': variant.option_b,
        'inventory_quantity': variant.inventory_quantity,
        'inventory_policy': variant.inventory_policy,
        'available': variant.available,
    }

def to_sku_index_row(entry: CatalogEntry, variant: Variant) -> Dict[str, Any]:
    return {
        'id': entry.id,
        'title': entry.title,
        'handle': entry.handle,
        'image': entry.image_url,
        'variant': {
            'id': variant.id,
            'sku': variant.sku,
            'price': variant.price,
            'inventory_quantity': variant.inventory_quantity,
            'inventory_policy': variant.inventory_policy,
        },
    }
