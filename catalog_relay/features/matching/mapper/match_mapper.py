"""
Match Mapper.
"""
from typing import Any, Dict, Iterable, List, Optional

from catalog_relay.features.catalog.mapper.catalog_mapper import to_entry_dict
from catalog_relay.features.matching.service.matcher.models import MatchResult, QueryRecord
from catalog_relay.schemas.catalog_schemas import QueryItemRequest

def to_query_record(item: Any) -> QueryRecord:
    if isinstance(item, QueryRecord):
        return item
    if isinstance(item, QueryItemRequest):
        return QueryRecord(name=item.name, sku=item.sku)
    if isinstance(item, dict):
        parsed = QueryItemRequest.model_validate(item)
        return QueryRecord(name=parsed.name, sku=parsed.sku)
    raise TypeError(f"Cannot build a QueryRecord from {type(item).__name__}")

def to_query_records(items: Iterable[Any]) -> List[QueryRecord]:
    return [to_query_record(item) for item in items]

def to_match_result_dict(result: MatchResult) -> Dict[str, Any]:
    product: Optional[Dict[str, Any]] = to_entry_dict(result.matched) if result.matched else None
    return {
        'query': {'name': result.query.name, 'sku': result.query.sku},
        'matched': result.is_match,
        'product': product,
        'matchScore': result.match_score,
        'matchReasons': list(result.match_reasons),
        'matchRules': list(result.match_rules),
        'totalAvailable': result.total_available,
    }
