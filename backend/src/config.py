"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.

The matching heuristics (prefix length, word-length thresholds, stoplist) are
empirically tuned values. They live here so they can be recalibrated per
catalog without touching the matching code.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_STOPLIST = ["nail", "polish", "color", "glue", "tool", "brush", "size"]

# Brand-tier category guard: when an item mentions words of exactly one group,
# brand matches are limited to descriptions containing one of its accepted words
DEFAULT_BRAND_CATEGORIES = [
    {
        "name": "polish",
        "triggers": ["polish", "gel", "lacquer", "color", "duo"],
        "accepts": ["polish", "gel", "lacquer"],
    },
    {
        "name": "tools",
        "triggers": ["brush", "tool", "dotting", "file", "buffer"],
        "accepts": ["brush", "tool", "file"],
    },
]


class BrandCategorySetting(BaseModel):
    """One product category for the brand-tier guard"""
    name: str
    triggers: List[str] = Field(min_length=1)
    accepts: List[str] = Field(min_length=1)

    @field_validator("triggers", "accepts")
    @classmethod
    def normalize_words(cls, v: List[str]) -> List[str]:
        words = [word.strip().lower() for word in v if word and word.strip()]
        if not words:
            raise ValueError("At least one non-empty word is required")
        return words


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment Variables:
        MATCH_PREFIX_LENGTH: Characters of the normalized item used by the exact-prefix strategy
        MATCH_MIN_QUERY_LENGTH: Normalized items shorter than this are never matched
        MATCH_BRAND_MIN_LENGTH: First token must be longer than this to act as a brand
        MATCH_MULTI_WORD_MIN_LENGTH: Words must be longer than this to count as significant
        MATCH_MULTI_WORD_MIN_COUNT: Significant words that must co-occur for a multi-word match
        MATCH_FALLBACK_MIN_WORD_LENGTH: Words must be longer than this for the single-word fallback
        MATCH_STOPLIST: JSON list of generic words ignored by the single-word fallback
        MATCH_BRAND_CATEGORIES: JSON list of {name, triggers, accepts} category guards for the brand tier
        MATCH_WORKERS: Thread pool size for batch matching (1 = sequential)
        MATCH_ALTERNATIVES_LIMIT: Alternative supplier offers attached to each match
        ORDER_QTY_MIN / ORDER_QTY_MAX: Accepted order quantity range
        CATALOG_INDEXED: Use the trigram index instead of a linear scan
        CATALOG_DATABASE_URL: SQLAlchemy URL for the product/supplier price tables
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
    """

    # Matching heuristics
    MATCH_PREFIX_LENGTH: int = Field(default=15, gt=0)
    MATCH_MIN_QUERY_LENGTH: int = Field(default=3, ge=1)
    MATCH_BRAND_MIN_LENGTH: int = Field(default=2, ge=0)
    MATCH_MULTI_WORD_MIN_LENGTH: int = Field(default=3, ge=0)
    MATCH_MULTI_WORD_MIN_COUNT: int = Field(default=2, ge=2)
    MATCH_FALLBACK_MIN_WORD_LENGTH: int = Field(default=4, ge=0)
    MATCH_STOPLIST: List[str] = Field(default_factory=lambda: list(DEFAULT_STOPLIST))
    MATCH_BRAND_CATEGORIES: List[BrandCategorySetting] = Field(
        default_factory=lambda: [BrandCategorySetting(**c) for c in DEFAULT_BRAND_CATEGORIES]
    )
    MATCH_WORKERS: int = Field(default=1, ge=1)
    MATCH_ALTERNATIVES_LIMIT: int = Field(default=3, ge=0)

    # Order items
    ORDER_QTY_MIN: int = Field(default=1, ge=1)
    ORDER_QTY_MAX: int = Field(default=100, ge=1)

    # Catalog
    CATALOG_INDEXED: bool = True
    CATALOG_DATABASE_URL: Optional[str] = None

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("MATCH_STOPLIST")
    @classmethod
    def normalize_stoplist(cls, v: List[str]) -> List[str]:
        """Stoplist words are compared against normalized tokens"""
        return [word.strip().lower() for word in v if word and word.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
