"""
Catalog Domain Entities.

Remote product records after validation at the fetch boundary. Entries are
frozen: refreshing availability produces new Variant objects.
"""
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class Variant:
    id: int
    sku: Optional[str]
    price: Optional[str] = None
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    inventory_quantity: int = 0
    inventory_item_id: Optional[int] = None
    inventory_policy: Optional[str] = None
    # None means "no live lookup was done", see `available`
    live_available: Optional[int] = None

    @property
    def available(self) -> int:
        if self.live_available is not None:
            return self.live_available
        return self.inventory_quantity

    def with_available(self, quantity: int) -> "Variant":
        return replace(self, live_available=int(quantity))


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    title: str
    vendor: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    variants: Tuple[Variant, ...] = ()
    handle: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def variant_ids(self) -> List[int]:
        return [v.id for v in self.variants]


@dataclass(frozen=True)
class CatalogPage:
    """One page as returned by a catalog client."""
    entries: Tuple[CatalogEntry, ...]
    next_cursor: Optional[str] = None
    total_count: Optional[int] = None
