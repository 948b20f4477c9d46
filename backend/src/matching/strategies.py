"""Match strategy tiers.

Each strategy looks at the normalized order item and returns the catalog rows
it accepts, each with a score. The engine tries them in priority order and the
first one that returns any rows wins; scores are only compared within a tier.

Tier                 Score
exact prefix         10
brand (first word)   5
multi-word           number of significant words found (>= 2 required)
single word          1
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from catalog.index import CatalogIndex
from catalog.models import CatalogEntry

from .ports import BrandCategory, MatchingConfig, MatchMethod

EXACT_PREFIX_SCORE = 10
BRAND_SCORE = 5
SINGLE_WORD_SCORE = 1


@dataclass(frozen=True)
class ScoredEntry:
    """Catalog row accepted by a strategy"""
    entry: CatalogEntry
    score: int


def _unique(words: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for word in words:
        if word not in seen:
            seen.add(word)
            result.append(word)
    return result


class MatchStrategy(ABC):
    """One matching tier."""

    method: MatchMethod

    @abstractmethod
    def find(self, normalized: str, words: Sequence[str], index: CatalogIndex) -> List[ScoredEntry]:
        """Find candidate rows for a normalized order item.

        Args:
            normalized: Normalized order item
            words: Tokens of normalized, in order
            index: Catalog index to search

        Returns:
            Accepted rows with scores (empty if the tier does not apply)
        """
        pass


class ExactPrefixStrategy(MatchStrategy):
    """Catalog description contains the first N characters of the item.

    Long literal prefixes of listing titles tend to be stable even when the
    suffix (shade codes, pick-any options) varies. Two unrelated products
    sharing a generic prefix will collide; that is accepted.
    """

    method = MatchMethod.EXACT_PREFIX

    def __init__(self, prefix_length: int):
        self.prefix_length = prefix_length

    def find(self, normalized, words, index):
        rows = index.search(normalized, self.prefix_length)
        return [ScoredEntry(entry, EXACT_PREFIX_SCORE) for entry in rows]


class BrandStrategy(MatchStrategy):
    """Catalog description contains the item's first word (usually the brand).

    Category guard: if the item mentions trigger words of exactly one
    category, only rows whose description contains one of that category's
    accepted words qualify.
    """

    method = MatchMethod.BRAND

    def __init__(self, brand_min_length: int, categories: Sequence[BrandCategory] = ()):
        self.brand_min_length = brand_min_length
        self.categories = tuple(categories)

    def find(self, normalized, words, index):
        if not words:
            return []

        brand = words[0]
        if len(brand) <= self.brand_min_length:
            return []

        rows = index.search_by_word(brand)
        accepts = self.accepted_words(normalized)
        if accepts:
            rows = [e for e in rows if any(word in e.normalized_description for word in accepts)]

        return [ScoredEntry(entry, BRAND_SCORE) for entry in rows]

    def accepted_words(self, normalized: str) -> Tuple[str, ...]:
        """Description words required for the item's category (empty if no single category applies)"""
        matched = [
            category for category in self.categories
            if any(word in normalized for word in category.triggers)
        ]
        if len(matched) != 1:
            return ()
        return matched[0].accepts


class MultiWordStrategy(MatchStrategy):
    """At least min_count significant words of the item appear in the description.

    Repeated words in the item count once, so a single shared word can never
    satisfy the minimum on its own.
    """

    method = MatchMethod.MULTI_WORD

    def __init__(self, min_word_length: int, min_count: int):
        self.min_word_length = min_word_length
        self.min_count = max(min_count, 2)

    def find(self, normalized, words, index):
        significant = _unique([w for w in words if len(w) > self.min_word_length])
        if len(significant) < self.min_count:
            return []

        # Rows containing every word carry the highest possible score
        full_rows = index.search_by_all_words(significant)
        if full_rows:
            return [ScoredEntry(entry, len(significant)) for entry in full_rows]

        counts: Dict[CatalogEntry, int] = {}
        for word in significant:
            for entry in index.search_by_word(word):
                counts[entry] = counts.get(entry, 0) + 1

        return [
            ScoredEntry(entry, count)
            for entry, count in counts.items()
            if count >= self.min_count
        ]


class SingleWordStrategy(MatchStrategy):
    """Any one distinctive (long, non-stoplisted) word appears in the description.

    Highest false-positive risk, so it runs last.
    """

    method = MatchMethod.SINGLE_WORD

    def __init__(self, min_word_length: int, stoplist: frozenset):
        self.min_word_length = min_word_length
        self.stoplist = stoplist

    def find(self, normalized, words, index):
        important = _unique([
            w for w in words
            if len(w) > self.min_word_length and w not in self.stoplist
        ])

        found: Dict[CatalogEntry, None] = {}
        for word in important:
            for entry in index.search_by_word(word):
                found.setdefault(entry, None)

        return [ScoredEntry(entry, SINGLE_WORD_SCORE) for entry in found]


def default_strategies(config: MatchingConfig) -> List[MatchStrategy]:
    """Build the four tiers in priority order from config"""
    return [
        ExactPrefixStrategy(config.prefix_length),
        BrandStrategy(config.brand_min_length, config.brand_categories),
        MultiWordStrategy(config.multi_word_min_length, config.multi_word_min_count),
        SingleWordStrategy(config.fallback_min_word_length, config.stoplist),
    ]
