"""Unit tests for the matching engine

Tests cover:
- Strategy tier priority (exact prefix > brand > multi-word > single word)
- Multi-word minimum and stoplist handling
- Lowest-price selection among top-scoring candidates
- Short query rejection without touching the catalog
- Matches without a purchasable price
- Batch ordering and preview ranking
"""

import pytest
from decimal import Decimal

import sys
from pathlib import Path
backend_src = Path(__file__).parent.parent.parent.parent / "src"
sys.path.insert(0, str(backend_src))

from catalog.index import ScanCatalogIndex, build_catalog_index
from catalog.models import CatalogEntry
from matching.engine import MatchingEngine
from matching.ports import MatcherError, MatchingConfig, MatchMethod, MatchResult
from matching.strategies import MultiWordStrategy, SingleWordStrategy, default_strategies
from catalog.normalization import normalize_item_name, tokenize


class SpyIndex(ScanCatalogIndex):
    """Scan index that records every lookup"""

    def __init__(self, entries):
        super().__init__(entries)
        self.calls = []

    def search(self, normalized_query, min_substring_len):
        self.calls.append(("search", normalized_query))
        return super().search(normalized_query, min_substring_len)

    def search_by_word(self, word):
        self.calls.append(("search_by_word", word))
        return super().search_by_word(word)

    def search_by_all_words(self, words):
        self.calls.append(("search_by_all_words", tuple(words)))
        return super().search_by_all_words(words)


def _engine(entries, **config):
    return MatchingEngine(build_catalog_index(entries), config=MatchingConfig(**config))


class TestEndToEnd:
    """Order item to cheapest supplier"""

    def test_exact_prefix_match(self):
        entries = [CatalogEntry(1, "DND DC Soak off Matte Top Coat 0.5 oz #200", "BEAUTY ZONE", Decimal("3.96"))]

        result = _engine(entries).match("DND DC Soak Off Gel Polish Duo #001")

        assert result.method == MatchMethod.EXACT_PREFIX
        assert result.match_score == 10
        assert result.matched_product_id == 1
        assert result.supplier_name == "BEAUTY ZONE"
        assert result.unit_price == Decimal("3.96")
        assert result.matched_description == "DND DC Soak off Matte Top Coat 0.5 oz #200"
        assert result.is_preference is False

    def test_cheapest_supplier_and_alternatives(self, engine):
        result = engine.match("DND DC Soak Off Gel Polish Duo #001")

        assert result.supplier_name == "SALON SUPPLY"
        assert result.unit_price == Decimal("2.00")
        assert [(o.supplier_name, o.price) for o in result.alternatives] == [("BEAUTY ZONE", Decimal("3.96"))]

    def test_annotations_do_not_block_prefix(self, engine):
        result = engine.match("[2 PCS] DND DC Soak Off *Free Gift* Gel")

        assert result.method == MatchMethod.EXACT_PREFIX
        assert result.matched_product_id == 1


class TestStrategyPriority:
    """First tier with candidates wins"""

    def test_exact_prefix_beats_brand_even_if_brand_is_cheaper(self):
        entries = [
            CatalogEntry(1, "DND DC Soak off Matte Top Coat", "BEAUTY ZONE", Decimal("3.96")),
            CatalogEntry(2, "DND Gel Polish Bottle", "SALON SUPPLY", Decimal("1.00")),
        ]

        result = _engine(entries).match("DND DC Soak Off Gel Polish Duo")

        assert result.method == MatchMethod.EXACT_PREFIX
        assert result.matched_product_id == 1

    def test_brand_match(self, engine):
        result = engine.match("OPI Infinite Shine Lacquer")

        assert result.method == MatchMethod.BRAND
        assert result.match_score == 5
        assert result.matched_product_id == 2
        assert result.supplier_name == "BEAUTY ZONE"

    def test_brand_requires_first_word_longer_than_two(self):
        entries = [CatalogEntry(1, "DC Top Coat", "BEAUTY ZONE", Decimal("3.00"))]

        assert not _engine(entries).match("DC Something Else").is_matched

    def test_brand_ties_pick_lowest_price(self):
        entries = [
            CatalogEntry(1, "Kiara Sky Gel A", "BEAUTY ZONE", Decimal("3.96")),
            CatalogEntry(2, "Kiara Sky Gel B", "SALON SUPPLY", Decimal("2.00")),
        ]

        result = _engine(entries).match("Kiara Extra Long Tips")

        assert result.method == MatchMethod.BRAND
        assert result.matched_product_id == 2
        assert result.unit_price == Decimal("2.00")

    def test_multi_word_match(self, engine):
        result = engine.match("Refill Powder Bubbly")

        assert result.method == MatchMethod.MULTI_WORD
        assert result.match_score == 2
        assert result.matched_product_id == 3
        assert result.supplier_name == "NAILS DEPOT"
        assert result.unit_price == Decimal("6.25")

    def test_single_word_fallback(self, engine):
        result = engine.match("Refill Stainless Jar")

        assert result.method == MatchMethod.SINGLE_WORD
        assert result.match_score == 1
        assert result.matched_product_id == 4


class TestBrandCategoryGuard:
    """Brand matches stay within the item's product category"""

    MIXED_CATALOG = [
        CatalogEntry(1, "OPI Nail File 180 Grit", "SALON SUPPLY", Decimal("1.00")),
        CatalogEntry(2, "OPI Nail Lacquer Big Apple Red", "BEAUTY ZONE", Decimal("8.50")),
    ]

    def test_tool_order_does_not_match_lacquer(self):
        entries = [CatalogEntry(1, "OPI Nail Lacquer Big Apple Red", "BEAUTY ZONE", Decimal("8.50"))]

        result = _engine(entries).match("OPI Dotting Tool Set 5pcs")

        assert result == MatchResult.no_match()

    def test_tool_order_matches_same_brand_tool(self):
        entries = [
            CatalogEntry(1, "OPI Nail Lacquer Big Apple Red", "BEAUTY ZONE", Decimal("1.00")),
            CatalogEntry(2, "OPI Nail Art Brush Set", "SALON SUPPLY", Decimal("6.00")),
        ]

        result = _engine(entries).match("OPI Dotting Tool Kit")

        assert result.method == MatchMethod.BRAND
        assert result.matched_product_id == 2

    def test_polish_order_skips_cheaper_tool(self):
        result = _engine(self.MIXED_CATALOG).match("OPI Infinite Shine Gel Polish")

        assert result.method == MatchMethod.BRAND
        assert result.matched_product_id == 2
        assert result.unit_price == Decimal("8.50")

    def test_both_categories_mentioned_disables_guard(self):
        result = _engine(self.MIXED_CATALOG).match("OPI Gel Brush Cleaner")

        assert result.matched_product_id == 1

    def test_no_category_words_disables_guard(self):
        result = _engine(self.MIXED_CATALOG).match("OPI Infinite Shine Kit")

        assert result.matched_product_id == 1

    def test_guard_can_be_turned_off(self):
        entries = [CatalogEntry(1, "OPI Nail Lacquer Big Apple Red", "BEAUTY ZONE", Decimal("8.50"))]

        result = _engine(entries, brand_categories=()).match("OPI Dotting Tool Set 5pcs")

        assert result.method == MatchMethod.BRAND
        assert result.matched_product_id == 1

    def test_accepted_words(self):
        strategy = default_strategies(MatchingConfig())[1]

        assert strategy.accepted_words("opi dotting tool set") == ("brush", "tool", "file")
        assert strategy.accepted_words("dnd gel polish duo") == ("polish", "gel", "lacquer")
        assert strategy.accepted_words("opi gel brush") == ()
        assert strategy.accepted_words("kiara sky dip") == ()


class TestMultiWordMinimum:
    """At least two significant words must co-occur"""

    def test_one_shared_word_is_not_a_multi_word_match(self, catalog_index):
        normalized = normalize_item_name("Refill Powder Jar")

        found = MultiWordStrategy(3, 2).find(normalized, tokenize(normalized), catalog_index)

        assert found == []

    def test_one_shared_word_falls_through_to_single_word(self, engine):
        result = engine.match("Refill Powder Jar")

        assert result.method == MatchMethod.SINGLE_WORD

    def test_two_shared_words_match(self, catalog_index):
        normalized = normalize_item_name("Refill Powder Bubbly")

        found = MultiWordStrategy(3, 2).find(normalized, tokenize(normalized), catalog_index)

        assert {s.entry.product_id for s in found} == {3}
        assert {s.score for s in found} == {2}

    def test_repeated_word_counts_once(self, catalog_index):
        normalized = normalize_item_name("Powder Refill Powder")

        found = MultiWordStrategy(3, 2).find(normalized, tokenize(normalized), catalog_index)

        assert found == []

    def test_min_count_never_below_two(self):
        assert MultiWordStrategy(3, 1).min_count == 2

    def test_all_words_present_scores_word_count(self, catalog_index):
        normalized = normalize_item_name("Zzz Powder Pink Bubbly")

        found = MultiWordStrategy(3, 2).find(normalized, tokenize(normalized), catalog_index)

        assert {s.score for s in found} == {3}


class TestStoplist:
    """Generic words never drive a single-word match"""

    STOPLIST_CATALOG = [
        CatalogEntry(1, "Gel Polish Remover Wraps", "BEAUTY ZONE", Decimal("2.00")),
        CatalogEntry(2, "Color Chart Display Wheel", "BEAUTY ZONE", Decimal("9.00")),
        CatalogEntry(3, "Tip Glue Brush-On", "SALON SUPPLY", Decimal("1.50")),
    ]

    def test_only_stoplisted_words_returns_no_match(self):
        result = _engine(self.STOPLIST_CATALOG).match("nail polish color glue")

        assert result == MatchResult.no_match()

    def test_single_word_strategy_ignores_stoplist(self, catalog_index):
        normalized = "nail polish color glue brush size"
        strategy = SingleWordStrategy(4, MatchingConfig().stoplist)

        assert strategy.find(normalized, tokenize(normalized), catalog_index) == []

    def test_custom_stoplist(self):
        config = MatchingConfig(stoplist=frozenset({"wraps"}))
        normalized = "remover wraps"
        strategy = default_strategies(config)[-1]

        found = strategy.find(normalized, tokenize(normalized), build_catalog_index(self.STOPLIST_CATALOG))

        assert [s.entry.product_id for s in found] == [1]


class TestRejection:
    """Empty and too-short items never reach the catalog"""

    @pytest.mark.parametrize("raw", ["AB", "", "   ", "[Color: Red] ab", None])
    def test_short_query_returns_no_match_without_scanning(self, catalog_entries, raw):
        index = SpyIndex(catalog_entries)
        engine = MatchingEngine(index, config=MatchingConfig())

        result = engine.match(raw)

        assert result == MatchResult.no_match()
        assert index.calls == []

    def test_three_characters_is_enough(self, catalog_entries):
        index = SpyIndex(catalog_entries)
        MatchingEngine(index, config=MatchingConfig()).match("DND")

        assert index.calls

    def test_empty_catalog_never_matches(self):
        engine = _engine([])

        assert engine.match("DND DC Soak Off Gel Polish") == MatchResult.no_match()


class TestPriceInvariant:
    """Supplier and price are both set or both None"""

    def test_match_without_valid_price(self):
        entries = [
            CatalogEntry(7, "Gelish Top It Off Sealer", "BEAUTY ZONE", None),
            CatalogEntry(7, "Gelish Top It Off Sealer", "SALON SUPPLY", Decimal("0")),
        ]

        result = _engine(entries).match("Gelish Top It Off Sealer 15ml")

        assert result.is_matched
        assert result.matched_product_id == 7
        assert result.supplier_name is None
        assert result.unit_price is None
        assert not result.has_price

    def test_result_rejects_supplier_without_price(self):
        with pytest.raises(MatcherError):
            MatchResult(matched_product_id=1, supplier_name="BEAUTY ZONE")

    def test_result_rejects_price_without_supplier(self):
        with pytest.raises(MatcherError):
            MatchResult(matched_product_id=1, unit_price=Decimal("1.00"))

    @pytest.mark.parametrize("raw", [
        "DND DC Soak Off Gel", "OPI Infinite Shine", "Refill Powder Bubbly",
        "Kiara Sky Dip Powder", "nothing like this", "AB",
    ])
    def test_results_satisfy_invariant(self, engine, raw):
        result = engine.match(raw)
        assert (result.supplier_name is None) == (result.unit_price is None)


class TestEngineErrors:
    """Precondition violations raise MatcherError"""

    def test_none_index_raises(self):
        with pytest.raises(MatcherError):
            MatchingEngine(None, config=MatchingConfig())

    def test_unexpected_error_is_wrapped(self, catalog_entries):
        class BrokenIndex(ScanCatalogIndex):
            def search(self, normalized_query, min_substring_len):
                raise RuntimeError("index corrupted")

        engine = MatchingEngine(BrokenIndex(catalog_entries), config=MatchingConfig())

        with pytest.raises(MatcherError) as exc_info:
            engine.match("DND DC Soak Off Gel")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestMatchBatch:
    """Batch matching keeps input order"""

    ITEMS = [
        "Refill Powder Bubbly",
        "DND DC Soak Off Gel Polish Duo",
        "AB",
        "OPI Infinite Shine Lacquer",
        "nothing like this",
        "Refill Stainless Jar",
    ]

    def test_sequential_order(self, engine):
        results = engine.match_batch(self.ITEMS)

        assert [r.matched_product_id for r in results] == [3, 1, None, 2, None, 4]

    def test_parallel_matches_sequential(self, catalog_index):
        sequential = MatchingEngine(catalog_index, config=MatchingConfig(workers=1))
        parallel = MatchingEngine(catalog_index, config=MatchingConfig(workers=4))

        assert parallel.match_batch(self.ITEMS * 5) == sequential.match_batch(self.ITEMS * 5)

    def test_empty_batch(self, engine):
        assert engine.match_batch([]) == []


class TestPreview:
    """Interactive candidate ranking"""

    def test_ranks_by_price_within_tier(self):
        entries = [
            CatalogEntry(1, "Kiara Sky Gel A", "BEAUTY ZONE", Decimal("3.96")),
            CatalogEntry(2, "Kiara Sky Gel B", "SALON SUPPLY", Decimal("2.00")),
            CatalogEntry(3, "Kiara Sky Gel C", "SALON SUPPLY", None),
        ]

        candidates = _engine(entries).preview("Kiara Extra Long Tips")

        assert [c.product_id for c in candidates] == [2, 1, 3]
        assert candidates[0].method == MatchMethod.BRAND
        assert candidates[2].best_supplier is None

    def test_preview_agrees_with_match(self, engine):
        raw = "DND DC Soak Off Gel Polish Duo"

        top = engine.preview(raw)[0]
        result = engine.match(raw)

        assert (top.product_id, top.best_supplier, top.best_price) == (
            result.matched_product_id, result.supplier_name, result.unit_price
        )

    def test_preview_limit_and_rejection(self, engine):
        assert engine.preview("AB") == []
        assert len(engine.preview("nail", limit=1)) <= 1
