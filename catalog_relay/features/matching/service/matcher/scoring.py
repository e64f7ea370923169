"""
Scoring rules for (query, catalog entry) pairs.

A rule is a pure function ``(query, entry) -> RuleHit | None``. Rules are
grouped; inside a group the first rule that fires wins, and the winning hits
of all groups are added up. The default policy has two groups, evaluated in
this order:

Name tiers (compared against the entry title)
    exact_title     normalized strings equal
    core_title      equal once the brand prefix / trailing dash are removed
    title_contains  one normalized string contains the other

SKU tiers (variants scanned in catalog order, first variant that hits wins)
    exact_sku       upper-cased SKUs equal
    stripped_sku    equal with non-alphanumerics removed
    prefix_sku      one stripped SKU starts with the other
"""
from typing import Callable, Dict, Optional, Sequence, Tuple

from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry
from .models import QueryRecord, RuleHit, ScoreCard
from .normalization import core_name, normalize_name, normalize_sku, strip_sku

Rule = Callable[[QueryRecord, CatalogEntry], Optional[RuleHit]]
SkuTier = Callable[[str, str], Optional[RuleHit]]

NAME_POINTS: Dict[str, int] = {
    'exact_title': 100,
    'core_title': 75,
    'title_contains': 50,
}

SKU_POINTS: Dict[str, int] = {
    'exact_sku': 100,
    'stripped_sku': 80,
    'prefix_sku': 60,
}

DEFAULT_BRAND_PREFIX = "LOFT"


def exact_title_rule(points: int = NAME_POINTS['exact_title']) -> Rule:
    def rule(query: QueryRecord, entry: CatalogEntry) -> Optional[RuleHit]:
        q = normalize_name(query.name)
        if q and q == normalize_name(entry.title):
            return RuleHit('exact_title', points, "Exact title match")
        return None
    return rule


def core_title_rule(brand: Optional[str] = DEFAULT_BRAND_PREFIX,
                    points: int = NAME_POINTS['core_title']) -> Rule:
    def rule(query: QueryRecord, entry: CatalogEntry) -> Optional[RuleHit]:
        q = core_name(query.name, brand)
        if q and q == core_name(entry.title, brand):
            return RuleHit('core_title', points, f"Core title match ({brand} prefix ignored)")
        return None
    return rule


def title_contains_rule(points: int = NAME_POINTS['title_contains']) -> Rule:
    def rule(query: QueryRecord, entry: CatalogEntry) -> Optional[RuleHit]:
        q = normalize_name(query.name)
        t = normalize_name(entry.title)
        if not q or not t:
            return None
        if q in t:
            return RuleHit('title_contains', points, f"Title contains \"{q}\"")
        if t in q:
            return RuleHit('title_contains', points, f"Query contains title \"{t}\"")
        return None
    return rule


def exact_sku_tier(points: int = SKU_POINTS['exact_sku']) -> SkuTier:
    def tier(query_sku: str, variant_sku: str) -> Optional[RuleHit]:
        q = normalize_sku(query_sku)
        if q and q == normalize_sku(variant_sku):
            return RuleHit('exact_sku', points, f"Exact SKU match ({q})")
        return None
    return tier


def stripped_sku_tier(points: int = SKU_POINTS['stripped_sku']) -> SkuTier:
    def tier(query_sku: str, variant_sku: str) -> Optional[RuleHit]:
        q = strip_sku(query_sku)
        if q and q == strip_sku(variant_sku):
            return RuleHit('stripped_sku', points,
                           f"SKU match ignoring separators ({normalize_sku(query_sku)} ~ {normalize_sku(variant_sku)})")
        return None
    return tier


def prefix_sku_tier(points: int = SKU_POINTS['prefix_sku']) -> SkuTier:
    def tier(query_sku: str, variant_sku: str) -> Optional[RuleHit]:
        q = strip_sku(query_sku)
        v = strip_sku(variant_sku)
        if not q or not v:
            return None
        if q.startswith(v) or v.startswith(q):
            return RuleHit('prefix_sku', points,
                           f"SKU prefix match ({normalize_sku(query_sku)} ~ {normalize_sku(variant_sku)})")
        return None
    return tier


def first_hit(rules: Sequence[Rule]) -> Rule:
    """Group rules so that only the first one firing counts."""
    rules = tuple(rules)

    def group(query: QueryRecord, entry: CatalogEntry) -> Optional[RuleHit]:
        for rule in rules:
            hit = rule(query, entry)
            if hit is not None:
                return hit
        return None
    return group


def variant_sku_rule(tiers: Sequence[SkuTier]) -> Rule:
    """Scan variants in order; the first variant any tier accepts decides."""
    tiers = tuple(tiers)

    def rule(query: QueryRecord, entry: CatalogEntry) -> Optional[RuleHit]:
        if not normalize_sku(query.sku):
            return None
        for variant in entry.variants:
            if not normalize_sku(variant.sku):
                continue
            for tier in tiers:
                hit = tier(query.sku, variant.sku)
                if hit is not None:
                    return hit
        return None
    return rule


class ScoringPolicy:
    """Ordered rule groups whose hits are summed into a ScoreCard."""

    def __init__(self, groups: Sequence[Rule]):
        self.groups: Tuple[Rule, ...] = tuple(groups)

    @classmethod
    def default(cls, brand_prefix: Optional[str] = DEFAULT_BRAND_PREFIX) -> "ScoringPolicy":
        name_group = first_hit([
            exact_title_rule(),
            core_title_rule(brand_prefix),
            title_contains_rule(),
        ])
        sku_group = variant_sku_rule([
            exact_sku_tier(),
            stripped_sku_tier(),
            prefix_sku_tier(),
        ])
        return cls([name_group, sku_group])

    def score(self, query: QueryRecord, entry: CatalogEntry) -> ScoreCard:
        hits = []
        for group in self.groups:
            hit = group(query, entry)
            if hit is not None:
                hits.append(hit)
        return ScoreCard(tuple(hits))
