from .core import AvailabilityMatcher, MIN_MATCH_SCORE, total_available
from .models import MatchResult, QueryRecord, RuleHit, ScoreCard
from .normalization import core_name, normalize_name, normalize_sku, strip_sku
from .scoring import ScoringPolicy
