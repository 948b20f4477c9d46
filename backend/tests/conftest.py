"""Pytest fixtures for catalog matching tests.

Provides reusable test fixtures for:
- A small nail-supply catalog with several suppliers per product
- Catalog indexes (trigram and linear scan)
- A matching engine with default heuristics
- A SQLite catalog database session

Usage:
    def test_brand_match(engine):
        result = engine.match("OPI Infinite Shine")
        assert result.method == MatchMethod.BRAND
"""

import sys
from decimal import Decimal
from pathlib import Path
from typing import Generator, List

import pytest
from sqlalchemy.orm import Session

# Adjust imports based on your project structure
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from catalog.index import build_catalog_index, CatalogIndex
from catalog.models import CatalogEntry
from catalog.repository import create_session_factory
from matching.engine import MatchingEngine
from matching.ports import MatchingConfig


@pytest.fixture(scope="function")
def catalog_entries() -> List[CatalogEntry]:
    """Catalog rows in product id, supplier name order"""
    return [
        CatalogEntry(1, "DND DC Soak off Matte Top Coat 0.5 oz #200", "BEAUTY ZONE", Decimal("3.96")),
        CatalogEntry(1, "DND DC Soak off Matte Top Coat 0.5 oz #200", "SALON SUPPLY", Decimal("2.00")),
        CatalogEntry(2, "OPI Nail Lacquer Big Apple Red", "BEAUTY ZONE", Decimal("8.50")),
        CatalogEntry(3, "Kiara Sky Dip Powder Pink Bubbly", "BEAUTY ZONE", None),
        CatalogEntry(3, "Kiara Sky Dip Powder Pink Bubbly", "NAILS DEPOT", Decimal("6.25")),
        CatalogEntry(4, "Cuticle Pusher Stainless Steel", "NAILS DEPOT", Decimal("4.00")),
        CatalogEntry(5, "Acrylic Nail Brush Size 8", "SALON SUPPLY", Decimal("5.10")),
    ]


@pytest.fixture(scope="function")
def catalog_index(catalog_entries) -> CatalogIndex:
    return build_catalog_index(catalog_entries)


@pytest.fixture(scope="function")
def engine(catalog_index) -> MatchingEngine:
    return MatchingEngine(catalog_index, config=MatchingConfig())


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite catalog database with tables created"""
    session_factory = create_session_factory("sqlite://", create_tables=True)
    session = session_factory()

    yield session

    session.close()
    session_factory.kw["bind"].dispose()
