"""Catalog index ports and implementations.

The matching engine only talks to CatalogIndex. Two implementations exist:
- ScanCatalogIndex: linear substring scan, the reference behaviour
- TrigramCatalogIndex: inverted index from character trigrams to rows,
  candidates are verified with the same substring test so results are identical

Both return entries in catalog order. An index is immutable once built and
may be shared across threads without locking.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from config import get_settings
from observability.metrics import catalog_entries

from .models import CatalogEntry

logger = logging.getLogger(__name__)

TRIGRAM_SIZE = 3


class CatalogError(Exception):
    """Exception raised for invalid catalog input."""
    pass


class CatalogIndex(ABC):
    """Port interface for searching catalog entries by normalized description.

    All query arguments are matched case-insensitively against
    CatalogEntry.normalized_description. An empty query matches nothing.
    """

    def __init__(self, entries: Sequence[CatalogEntry]):
        self._entries: Tuple[CatalogEntry, ...] = tuple(entries)
        by_product: Dict[int, List[CatalogEntry]] = defaultdict(list)
        for entry in self._entries:
            by_product[entry.product_id].append(entry)
        self._by_product = {pid: tuple(rows) for pid, rows in by_product.items()}

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entries_for_product(self, product_id: int) -> Tuple[CatalogEntry, ...]:
        """Return every supplier row of one product (empty if unknown)"""
        return self._by_product.get(product_id, ())

    def search(self, normalized_query: str, min_substring_len: int) -> List[CatalogEntry]:
        """Find entries containing the query truncated to min_substring_len chars.

        Args:
            normalized_query: Normalized order item text
            min_substring_len: Prefix length to search for

        Returns:
            Matching entries in catalog order
        """
        return self.search_by_word(normalized_query[:min_substring_len])

    @abstractmethod
    def search_by_word(self, word: str) -> List[CatalogEntry]:
        """Find entries whose description contains word as a substring.

        Args:
            word: Text to look for

        Returns:
            Matching entries in catalog order
        """
        pass

    def search_by_all_words(self, words: Sequence[str]) -> List[CatalogEntry]:
        """Find entries whose description contains every word (AND semantics).

        Args:
            words: Words that must all be present

        Returns:
            Matching entries in catalog order, empty if words is empty
        """
        words = [w.lower() for w in words if w]
        if not words:
            return []

        # Start from the rarest word's rows and verify the rest
        candidates = min((self.search_by_word(w) for w in words), key=len)
        return [
            entry for entry in candidates
            if all(w in entry.normalized_description for w in words)
        ]


class ScanCatalogIndex(CatalogIndex):
    """Reference index: linear scan over all entries."""

    def search_by_word(self, word: str) -> List[CatalogEntry]:
        word = word.lower()
        if not word:
            return []
        return [entry for entry in self._entries if word in entry.normalized_description]


class TrigramCatalogIndex(CatalogIndex):
    """Index rows by character trigrams of their normalized description.

    A substring query of length >= 3 can only occur in rows that contain all
    of its trigrams, so the posting lists are intersected first and the
    survivors verified. Shorter queries fall back to a scan.
    """

    def __init__(self, entries: Sequence[CatalogEntry]):
        super().__init__(entries)
        postings: Dict[str, Set[int]] = defaultdict(set)
        for position, entry in enumerate(self._entries):
            for gram in _trigrams(entry.normalized_description):
                postings[gram].add(position)
        self._postings = dict(postings)

    def search_by_word(self, word: str) -> List[CatalogEntry]:
        word = word.lower()
        if not word:
            return []

        if len(word) < TRIGRAM_SIZE:
            return [entry for entry in self._entries if word in entry.normalized_description]

        posting_lists = []
        for gram in set(_trigrams(word)):
            positions = self._postings.get(gram)
            if not positions:
                return []
            posting_lists.append(positions)

        posting_lists.sort(key=len)
        positions = set(posting_lists[0])
        for other in posting_lists[1:]:
            positions &= other
            if not positions:
                return []

        return [
            self._entries[p] for p in sorted(positions)
            if word in self._entries[p].normalized_description
        ]


def _trigrams(text: str) -> Iterable[str]:
    for i in range(len(text) - TRIGRAM_SIZE + 1):
        yield text[i:i + TRIGRAM_SIZE]


def build_catalog_index(
    entries: Optional[Iterable[CatalogEntry]],
    indexed: Optional[bool] = None
) -> CatalogIndex:
    """Build an immutable catalog index from catalog rows.

    Args:
        entries: Catalog rows supplied by a loader (price sheet import, repository)
        indexed: Build a TrigramCatalogIndex (True) or a ScanCatalogIndex (False),
            default from the CATALOG_INDEXED setting

    Returns:
        CatalogIndex ready for matching

    Raises:
        CatalogError: If entries is None or a (product_id, supplier_name) pair repeats
    """
    if entries is None:
        raise CatalogError("Catalog entries are required to build an index")

    if indexed is None:
        indexed = get_settings().CATALOG_INDEXED

    rows = list(entries)
    seen = set()
    for entry in rows:
        key = (entry.product_id, entry.supplier_name)
        if key in seen:
            raise CatalogError(
                f"Duplicate price for product {entry.product_id} from supplier '{entry.supplier_name}'"
            )
        seen.add(key)

    index_cls = TrigramCatalogIndex if indexed else ScanCatalogIndex
    index = index_cls(rows)
    catalog_entries.set(len(rows))

    logger.info(
        f"Built {index_cls.__name__} with {len(rows)} rows "
        f"for {len({e.product_id for e in rows})} products"
    )
    return index
