from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, Sequence

from catalog_relay.features.catalog.domain.catalog_entity import CatalogEntry
from catalog_relay.services.system.logger_service import get_logger, log_match_summary
from .models import MatchResult, QueryRecord, ScoreCard
from .scoring import ScoringPolicy

logger = get_logger(__name__)

# Lowest score that still counts as a match
MIN_MATCH_SCORE = 50


def total_available(entry: CatalogEntry, availability: Optional[Mapping[int, int]] = None) -> int:
    """Sum of live availability (when known) or last known inventory over all variants."""
    total = 0
    for variant in entry.variants:
        if availability is not None and variant.id in availability:
            total += int(availability[variant.id])
        else:
            total += variant.available
    return total


class AvailabilityMatcher:
    """
    Matches uploaded product rows against the fetched catalog.

    Each query is scored against every entry independently, so one entry may
    be the best match of several queries. The highest score wins; on a tie the
    entry seen first in catalog order is kept.
    """

    def __init__(self, policy: Optional[ScoringPolicy] = None, min_score: int = MIN_MATCH_SCORE):
        self.policy = policy or ScoringPolicy.default()
        self.min_score = min_score

    def score_entry(self, query: QueryRecord, entry: CatalogEntry) -> ScoreCard:
        return self.policy.score(query, entry)

    def best_match(self, query: QueryRecord, entries: Sequence[CatalogEntry],
                   availability: Optional[Mapping[int, int]] = None) -> MatchResult:
        if query.is_empty:
            return MatchResult(query=query)

        best_entry: Optional[CatalogEntry] = None
        best_card: Optional[ScoreCard] = None
        for entry in entries:
            card = self.score_entry(query, entry)
            if best_card is None or card.score > best_card.score:
                best_entry, best_card = entry, card

        if best_entry is None or best_card.score < self.min_score or best_card.score == 0:
            return MatchResult(query=query)

        return MatchResult(
            query=query,
            matched=best_entry,
            match_score=best_card.score,
            match_reasons=best_card.reasons,
            match_rules=best_card.tags,
            total_available=total_available(best_entry, availability),
        )

    def match(self, entries: Sequence[CatalogEntry], queries: Iterable[QueryRecord],
              availability: Optional[Mapping[int, int]] = None) -> List[MatchResult]:
        entries = list(entries)
        results = [self.best_match(q, entries, availability) for q in queries]
        log_match_summary(
            logger,
            query_count=len(results),
            matched_count=sum(1 for r in results if r.is_match),
            catalog_size=len(entries),
        )
        return results

    def apply_availability(self, results: Iterable[MatchResult],
                           availability: Mapping[int, int]) -> List[MatchResult]:
        """Recompute totals for matched results from a live availability map."""
        refreshed = []
        for result in results:
            if result.matched is None:
                refreshed.append(result)
                continue
            variants = tuple(
                v.with_available(availability[v.id]) if v.id in availability else v
                for v in result.matched.variants
            )
            entry = replace(result.matched, variants=variants)
            refreshed.append(replace(result, matched=entry, total_available=total_available(entry)))
        return refreshed
