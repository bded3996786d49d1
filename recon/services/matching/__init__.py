"""Transaction matching engine."""

from .applier import AppliedMatches, apply_match_groups
from .exact import ExactMatcher
from .fuzzy import FuzzyMatcher

__all__ = [
    "ExactMatcher",
    "FuzzyMatcher",
    "AppliedMatches",
    "apply_match_groups",
]
