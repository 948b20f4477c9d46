"""Matching module.

Maps noisy free-text order items to catalog products using four strategy
tiers in strict priority order:
- Exact prefix of the normalized item
- Brand (first word)
- Multi-word co-occurrence (at least two significant words)
- Single distinctive word (stoplist applied)

Learned item preferences can take precedence over automatic matching.
"""

from .ports import (
    BrandCategory,
    MatcherPort,
    MatchResult,
    MatchCandidate,
    MatcherError,
    MatchMethod,
    MatchingConfig,
)
from .engine import MatchingEngine
from .strategies import (
    MatchStrategy,
    ExactPrefixStrategy,
    BrandStrategy,
    MultiWordStrategy,
    SingleWordStrategy,
    default_strategies,
)
from .preferences import ItemPreference, ItemPreferenceStore, PreferenceAwareMatcher, preference_strength

__all__ = [
    "BrandCategory",
    "MatcherPort",
    "MatchResult",
    "MatchCandidate",
    "MatcherError",
    "MatchMethod",
    "MatchingConfig",
    "MatchingEngine",
    "MatchStrategy",
    "ExactPrefixStrategy",
    "BrandStrategy",
    "MultiWordStrategy",
    "SingleWordStrategy",
    "default_strategies",
    "ItemPreference",
    "ItemPreferenceStore",
    "PreferenceAwareMatcher",
    "preference_strength",
]
