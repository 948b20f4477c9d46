"""Matching ports and value objects.

Defines the MatcherPort interface shared by the batch picklist path and the
interactive preview path, plus the result types they exchange.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from config import DEFAULT_BRAND_CATEGORIES, DEFAULT_STOPLIST, Settings, get_settings
from pricing.service import SupplierOffer


class MatcherError(Exception):
    """Exception raised for matching precondition violations and system errors."""
    pass


class MatchMethod(str, Enum):
    """Strategy tier that produced a match, in priority order"""
    PREFERENCE = "preference"
    EXACT_PREFIX = "exact_prefix"
    BRAND = "brand"
    MULTI_WORD = "multi_word"
    SINGLE_WORD = "single_word"


@dataclass(frozen=True)
class BrandCategory:
    """Category guard for the brand tier.

    Attributes:
        name: Category label for logs
        triggers: Item words that place an order item in this category
        accepts: Description words a brand match must contain for this category
    """
    name: str
    triggers: Tuple[str, ...]
    accepts: Tuple[str, ...]


def brand_categories_from(raw: Iterable) -> Tuple[BrandCategory, ...]:
    """Build BrandCategory values from dicts or BrandCategorySetting models"""
    categories = []
    for item in raw:
        data = item if isinstance(item, dict) else item.model_dump()
        categories.append(BrandCategory(
            name=data["name"],
            triggers=tuple(data["triggers"]),
            accepts=tuple(data["accepts"])
        ))
    return tuple(categories)


@dataclass(frozen=True)
class MatchingConfig:
    """Tunable matching heuristics.

    Word-length thresholds are exclusive: a word qualifies when
    len(word) > threshold.

    Attributes:
        prefix_length: Characters of the normalized item used by the exact-prefix tier
        min_query_length: Normalized items shorter than this are rejected
        brand_min_length: First token must be longer than this for the brand tier
        multi_word_min_length: Words longer than this count for the multi-word tier
        multi_word_min_count: Significant words that must co-occur (never below 2)
        fallback_min_word_length: Words longer than this count for the single-word tier
        stoplist: Normalized words ignored by the single-word tier
        brand_categories: Category guards applied to brand-tier rows
        workers: Thread pool size for match_batch (1 = sequential)
        alternatives_limit: Alternative offers attached to each match
    """
    prefix_length: int = 15
    min_query_length: int = 3
    brand_min_length: int = 2
    multi_word_min_length: int = 3
    multi_word_min_count: int = 2
    fallback_min_word_length: int = 4
    stoplist: frozenset = frozenset(DEFAULT_STOPLIST)
    brand_categories: Tuple[BrandCategory, ...] = brand_categories_from(DEFAULT_BRAND_CATEGORIES)
    workers: int = 1
    alternatives_limit: int = 3

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MatchingConfig":
        """Build matching config from application settings.

        Args:
            settings: Settings instance (default: cached get_settings())
        """
        settings = settings or get_settings()
        return cls(
            prefix_length=settings.MATCH_PREFIX_LENGTH,
            min_query_length=settings.MATCH_MIN_QUERY_LENGTH,
            brand_min_length=settings.MATCH_BRAND_MIN_LENGTH,
            multi_word_min_length=settings.MATCH_MULTI_WORD_MIN_LENGTH,
            multi_word_min_count=settings.MATCH_MULTI_WORD_MIN_COUNT,
            fallback_min_word_length=settings.MATCH_FALLBACK_MIN_WORD_LENGTH,
            stoplist=frozenset(settings.MATCH_STOPLIST),
            brand_categories=brand_categories_from(settings.MATCH_BRAND_CATEGORIES),
            workers=settings.MATCH_WORKERS,
            alternatives_limit=settings.MATCH_ALTERNATIVES_LIMIT,
        )


@dataclass(frozen=True)
class MatchCandidate:
    """Ranked product candidate for interactive preview.

    Attributes:
        product_id: Catalog product id
        description: Product description for display
        score: Score within the winning strategy
        method: Winning strategy
        best_supplier: Cheapest supplier for this product (None if unpriced)
        best_price: Price of best_supplier (None if unpriced)
    """
    product_id: int
    description: str
    score: int
    method: MatchMethod
    best_supplier: Optional[str]
    best_price: Optional[Decimal]


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one order item.

    An unmatched item has every optional field None and match_score 0.
    A matched product without any purchasable price keeps matched_product_id
    but has supplier_name and unit_price None.

    Attributes:
        matched_product_id: Product id of the match (None if no match)
        supplier_name: Cheapest supplier (None if no match or no valid price)
        unit_price: Price from supplier_name (None together with supplier_name)
        match_score: Score within the winning strategy tier (0 if no match)
        matched_description: Catalog description of the match, for diagnostics
        method: Winning strategy tier
        is_preference: True if the match came from a learned item preference
        alternatives: Other supplier offers for the matched product, cheapest first
    """
    matched_product_id: Optional[int] = None
    supplier_name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    match_score: int = 0
    matched_description: Optional[str] = None
    method: Optional[MatchMethod] = None
    is_preference: bool = False
    alternatives: List[SupplierOffer] = field(default_factory=list)

    def __post_init__(self):
        if (self.supplier_name is None) != (self.unit_price is None):
            raise MatcherError(
                "supplier_name and unit_price must both be set or both be None"
            )

    @property
    def is_matched(self) -> bool:
        return self.matched_product_id is not None

    @property
    def has_price(self) -> bool:
        return self.unit_price is not None

    @classmethod
    def no_match(cls) -> "MatchResult":
        return cls()


class MatcherPort(ABC):
    """Port interface for order item matching.

    Implementations:
    - MatchingEngine: four-tier text matching over a CatalogIndex
    - PreferenceAwareMatcher: learned item preferences, falling back to an engine
    """

    @abstractmethod
    def match(self, raw_item: str) -> MatchResult:
        """Match one raw order item description to the catalog.

        Args:
            raw_item: Free-text item description

        Returns:
            MatchResult (the empty result when nothing matches)

        Raises:
            MatcherError: If matching fails due to a system error
        """
        pass

    @abstractmethod
    def match_batch(self, raw_items: Sequence[str]) -> List[MatchResult]:
        """Match multiple items.

        Args:
            raw_items: Item descriptions

        Returns:
            List of match results (same order as raw_items)

        Raises:
            MatcherError: If batch matching fails
        """
        pass
