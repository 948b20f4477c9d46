"""Catalog domain module: normalization, catalog rows and search index.

Loaders live in submodules and are imported directly:
- catalog.import_service: supplier price sheets (CSV, Excel)
- catalog.repository: product/supplier price tables
"""

from .normalization import normalize_item_name, tokenize
from .models import CatalogEntry
from .index import (
    CatalogError,
    CatalogIndex,
    ScanCatalogIndex,
    TrigramCatalogIndex,
    build_catalog_index,
)
from .schemas import SupplierColumnMap, PriceSheetImportError, PriceSheetImportResult

__all__ = [
    "normalize_item_name",
    "tokenize",
    "CatalogEntry",
    "CatalogError",
    "CatalogIndex",
    "ScanCatalogIndex",
    "TrigramCatalogIndex",
    "build_catalog_index",
    "SupplierColumnMap",
    "PriceSheetImportError",
    "PriceSheetImportResult",
]
