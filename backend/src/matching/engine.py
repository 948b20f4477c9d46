"""Multi-strategy matching engine.

Pipeline per order item:
1. Normalize the raw description; reject empty or too-short items
2. Run strategy tiers in priority order (exact prefix, brand, multi-word,
   single word); the first tier that accepts any catalog row wins
3. Keep the rows with the tier's highest score
4. Pick the cheapest valid supplier offer among them (PriceService)
5. Attach alternative offers for the matched product

The engine holds no mutable state; one instance can serve concurrent callers.
"""

import contextvars
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from catalog.index import CatalogIndex
from catalog.normalization import normalize_item_name, tokenize
from observability.metrics import match_duration_seconds, match_outcomes_total
from pricing.service import PriceService

from .ports import MatcherPort, MatcherError, MatchCandidate, MatchingConfig, MatchMethod, MatchResult
from .strategies import MatchStrategy, ScoredEntry, default_strategies

logger = logging.getLogger(__name__)


class MatchingEngine(MatcherPort):
    """Match free-text order items to catalog products and cheapest suppliers.

    Args:
        index: Catalog index built once per catalog snapshot
        config: Matching heuristics (default: from application settings)
        strategies: Tier list override, in priority order
    """

    def __init__(
        self,
        index: CatalogIndex,
        config: Optional[MatchingConfig] = None,
        strategies: Optional[Sequence[MatchStrategy]] = None
    ):
        if index is None:
            raise MatcherError("A catalog index is required for matching")

        self.index = index
        self.config = config or MatchingConfig.from_settings()
        self.strategies = list(strategies) if strategies is not None else default_strategies(self.config)

    def match(self, raw_item: str) -> MatchResult:
        """Match one order item.

        Args:
            raw_item: Free-text item description

        Returns:
            MatchResult; the empty result if nothing matches

        Raises:
            MatcherError: If matching fails due to a system error
        """
        start = time.perf_counter()
        try:
            result = self._match(raw_item)
        except MatcherError:
            raise
        except Exception as e:
            raise MatcherError(f"Matching failed for '{raw_item}': {str(e)}") from e
        finally:
            match_duration_seconds.observe(time.perf_counter() - start)

        match_outcomes_total.labels(method=result.method.value if result.method else "none").inc()
        return result

    def match_batch(self, raw_items: Sequence[str]) -> List[MatchResult]:
        """Match multiple items, in parallel when config.workers > 1.

        Args:
            raw_items: Item descriptions

        Returns:
            List of match results (same order as raw_items)
        """
        items = list(raw_items)
        if self.config.workers <= 1 or len(items) <= 1:
            return [self.match(item) for item in items]

        # Each task runs in a copy of the caller's context so the run id follows it
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = [
                executor.submit(contextvars.copy_context().run, self.match, item)
                for item in items
            ]
            return [future.result() for future in futures]

    def preview(self, raw_item: str, limit: int = 5) -> List[MatchCandidate]:
        """Rank the winning tier's products for interactive review.

        Args:
            raw_item: Free-text item description
            limit: Max candidates to return

        Returns:
            Candidates sorted by score desc, best price asc, product_id
        """
        normalized = self._prepare(raw_item)
        if normalized is None:
            return []

        method, scored = self._run_strategies(normalized)
        if not scored:
            return []

        best_scores = {}
        for item in scored:
            pid = item.entry.product_id
            best_scores[pid] = max(best_scores.get(pid, 0), item.score)

        candidates = []
        for pid, score in best_scores.items():
            rows = [s.entry for s in scored if s.entry.product_id == pid]
            selection = PriceService.select_best_price(rows)
            candidates.append(MatchCandidate(
                product_id=pid,
                description=rows[0].description,
                score=score,
                method=method,
                best_supplier=selection.supplier_name,
                best_price=selection.price
            ))

        candidates.sort(key=lambda c: (
            -c.score,
            c.best_price is None,
            c.best_price if c.best_price is not None else 0,
            c.product_id
        ))
        return candidates[:limit]

    def _prepare(self, raw_item: Optional[str]) -> Optional[str]:
        """Normalize the item, or return None if it is too short to discriminate"""
        if raw_item is None or not str(raw_item).strip():
            return None

        normalized = normalize_item_name(str(raw_item))
        if len(normalized) < self.config.min_query_length:
            return None
        return normalized

    def _run_strategies(self, normalized: str):
        words = tokenize(normalized)
        for strategy in self.strategies:
            scored = strategy.find(normalized, words, self.index)
            if scored:
                return strategy.method, scored
        return None, []

    def _match(self, raw_item: str) -> MatchResult:
        normalized = self._prepare(raw_item)
        if normalized is None:
            logger.debug(f"Rejected item too short to match: '{raw_item}'")
            return MatchResult.no_match()

        method, scored = self._run_strategies(normalized)
        if not scored:
            logger.debug(f"No match found for '{raw_item}'")
            return MatchResult.no_match()

        top_score, top_rows = _top_rows(scored)
        selection = PriceService.select_best_price(top_rows)

        if selection.found:
            entry = selection.entry
        else:
            entry = min(top_rows, key=lambda e: (e.product_id, e.supplier_name))
            logger.info(
                f"Matched '{raw_item}' to product {entry.product_id} but no supplier has a valid price",
                extra={"method": method.value}
            )

        alternatives = PriceService.alternative_offers(
            self.index.entries_for_product(entry.product_id),
            exclude_supplier=selection.supplier_name,
            limit=self.config.alternatives_limit
        )

        if selection.found:
            logger.debug(
                f"Match found for '{raw_item}' via {method.value}: "
                f"{selection.supplier_name} at ${selection.price}",
                extra={"method": method.value, "supplier": selection.supplier_name}
            )

        return MatchResult(
            matched_product_id=entry.product_id,
            supplier_name=selection.supplier_name,
            unit_price=selection.price,
            match_score=top_score,
            matched_description=entry.description,
            method=method,
            alternatives=alternatives
        )


def _top_rows(scored: Sequence[ScoredEntry]):
    top_score = max(item.score for item in scored)
    return top_score, [item.entry for item in scored if item.score == top_score]
