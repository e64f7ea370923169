from dataclasses import dataclass
from typing import Optional, Tuple

from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry


@dataclass(frozen=True)
class QueryRecord:
    """
    One caller supplied row to match against the catalog.

    Attributes:
        name (Optional[str]): Product name as written in the uploaded list
        sku (Optional[str]): SKU as written in the uploaded list
    """
    name: Optional[str] = None
    sku: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.name and self.name.strip()) and not (self.sku and self.sku.strip())


@dataclass(frozen=True)
class RuleHit:
    """
    Outcome of one scoring rule that fired.

    Attributes:
        tag (str): Stable rule identifier, e.g. "exact_title"
        points (int): Contribution to the match score
        reason (str): Human readable explanation appended to match_reasons
    """
    tag: str
    points: int
    reason: str


@dataclass(frozen=True)
class ScoreCard:
    """Score of one (query, entry) pair; `score` is the sum of the hits' points."""
    hits: Tuple[RuleHit, ...] = ()

    @property
    def score(self) -> int:
        return sum(hit.points for hit in self.hits)

    @property
    def reasons(self) -> Tuple[str, ...]:
        return tuple(hit.reason for hit in self.hits)

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(hit.tag for hit in self.hits)


@dataclass(frozen=True)
class MatchResult:
    """
    Best catalog entry for one query record.

    Attributes:
        query (QueryRecord): The input row
        matched (Optional[CatalogEntry]): Selected entry, None when nothing cleared the threshold
        match_score (int): Sum of the points of the rules in match_reasons
        match_reasons (Tuple[str, ...]): Explanations in the order the rules fired
        match_rules (Tuple[str, ...]): Rule tags parallel to match_reasons
        total_available (int): Sum of `available` over the matched entry's variants
    """
    query: QueryRecord
    matched: Optional[CatalogEntry] = None
    match_score: int = 0
    match_reasons: Tuple[str, ...] = ()
    match_rules: Tuple[str, ...] = ()
    total_available: int = 0

    @property
    def is_match(self) -> bool:
        return self.matched is not None
