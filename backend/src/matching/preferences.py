"""Learned item preferences (learning loop).

When a user overrides the supplier or product chosen for an order item, the
choice is recorded against the item text. Later picklists reuse it before
falling back to automatic matching, as long as the catalog still carries a
valid price for that product/supplier pair.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from catalog.index import CatalogIndex
from observability.metrics import match_outcomes_total
from pricing.service import PriceService, parse_price

from .ports import MatcherPort, MatchMethod, MatchResult
from .strategies import EXACT_PREFIX_SCORE

logger = logging.getLogger(__name__)

# Frequency at which a preference is considered fully established
FULL_STRENGTH_FREQUENCY = 5

# Recency decay: (days since last use, multiplier), oldest first
STRENGTH_DECAY = ((90, 0.8), (30, 0.9))
MIN_STRENGTH = 0.1


@dataclass(frozen=True)
class ItemPreference:
    """Learned mapping from an order item text to a product/supplier pair.

    Attributes:
        original_item: Item text as it appeared on the order
        product_id: Chosen catalog product
        supplier_name: Chosen supplier
        frequency: Times this choice was confirmed
        last_used: Last confirmation time (UTC)
    """
    original_item: str
    product_id: int
    supplier_name: str
    frequency: int = 1
    last_used: Optional[datetime] = None


def preference_key(item: str) -> str:
    """Preferences are keyed by trimmed, lowercased item text"""
    return (item or "").strip().lower()


def preference_strength(preference: ItemPreference, now: Optional[datetime] = None) -> float:
    """Confidence in a preference (0.1-1.0).

    Grows with frequency up to FULL_STRENGTH_FREQUENCY uses, is multiplied by
    0.9 after 30 days without use and by 0.8 after 90, and never drops below 0.1.

    Args:
        preference: Learned preference
        now: Reference time (default: current UTC time)
    """
    strength = min(preference.frequency / FULL_STRENGTH_FREQUENCY, 1.0)

    if preference.last_used is not None:
        now = now or datetime.now(timezone.utc)
        days_since_used = (now - preference.last_used).total_seconds() / 86400
        for days, factor in STRENGTH_DECAY:
            if days_since_used > days:
                strength *= factor
                break

    return max(strength, MIN_STRENGTH)


class ItemPreferenceStore:
    """In-memory store of learned item preferences.

    Safe to share between threads. Persistence is left to the caller:
    snapshot with all() and restore by passing the list to the constructor.
    """

    def __init__(self, preferences: Optional[Iterable[ItemPreference]] = None):
        self._lock = threading.Lock()
        self._preferences: Dict[str, ItemPreference] = {}
        for pref in preferences or []:
            self._preferences[preference_key(pref.original_item)] = pref

    def get(self, item: str) -> Optional[ItemPreference]:
        with self._lock:
            return self._preferences.get(preference_key(item))

    def get_many(self, items: Sequence[str]) -> Dict[str, ItemPreference]:
        """Look up several items at once, keyed by preference_key()"""
        with self._lock:
            return {
                preference_key(item): self._preferences[preference_key(item)]
                for item in items
                if preference_key(item) in self._preferences
            }

    def record(self, item: str, product_id: int, supplier_name: str) -> ItemPreference:
        """Record a user's choice for an item.

        Confirming the same product/supplier pair again increments its
        frequency; choosing a different pair replaces it and restarts at 1.

        Args:
            item: Order item text
            product_id: Chosen product
            supplier_name: Chosen supplier

        Returns:
            The stored preference
        """
        key = preference_key(item)
        if not key:
            raise ValueError("Item text is required to record a preference")

        now = datetime.now(timezone.utc)
        with self._lock:
            existing = self._preferences.get(key)
            if (
                existing is not None
                and existing.product_id == product_id
                and existing.supplier_name == supplier_name
            ):
                pref = replace(existing, frequency=existing.frequency + 1, last_used=now)
            else:
                pref = ItemPreference(
                    original_item=item,
                    product_id=product_id,
                    supplier_name=supplier_name,
                    frequency=1,
                    last_used=now
                )
            self._preferences[key] = pref

        logger.info(
            f"Learned preference: '{item}' -> product {product_id}, "
            f"supplier '{supplier_name}' (frequency: {pref.frequency})"
        )
        return pref

    def remove(self, item: str) -> bool:
        with self._lock:
            return self._preferences.pop(preference_key(item), None) is not None

    def all(self) -> List[ItemPreference]:
        with self._lock:
            return list(self._preferences.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._preferences)


class PreferenceAwareMatcher(MatcherPort):
    """Use learned preferences first, then fall back to automatic matching.

    Args:
        matcher: Fallback matcher (normally a MatchingEngine)
        index: Catalog index used to price preferred product/supplier pairs
        store: Learned item preferences
    """

    def __init__(self, matcher: MatcherPort, index: CatalogIndex, store: ItemPreferenceStore):
        self.matcher = matcher
        self.index = index
        self.store = store

    def match(self, raw_item: str) -> MatchResult:
        preference = self.store.get(raw_item) if raw_item else None
        if preference is not None:
            result = self._from_preference(preference)
            if result is not None:
                match_outcomes_total.labels(method=MatchMethod.PREFERENCE.value).inc()
                return result
            logger.info(
                f"Preference for '{raw_item}' is stale (product {preference.product_id}, "
                f"supplier '{preference.supplier_name}'), using automatic matching"
            )

        return self.matcher.match(raw_item)

    def match_batch(self, raw_items: Sequence[str]) -> List[MatchResult]:
        return [self.match(item) for item in raw_items]

    def _from_preference(self, preference: ItemPreference) -> Optional[MatchResult]:
        rows = self.index.entries_for_product(preference.product_id)
        chosen = next((e for e in rows if e.supplier_name == preference.supplier_name), None)
        if chosen is None:
            return None

        price = parse_price(chosen.price)
        if price is None:
            return None

        return MatchResult(
            matched_product_id=chosen.product_id,
            supplier_name=chosen.supplier_name,
            unit_price=price,
            match_score=EXACT_PREFIX_SCORE,
            matched_description=chosen.description,
            method=MatchMethod.PREFERENCE,
            is_preference=True,
            alternatives=PriceService.alternative_offers(rows, exclude_supplier=chosen.supplier_name)
        )
