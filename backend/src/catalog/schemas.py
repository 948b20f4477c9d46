"""Pydantic schemas for catalog ingestion (price sheets)"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator

# Header keywords that identify the product description column
ITEM_COLUMN_KEYWORDS = ("item", "product", "name", "description")


class SupplierColumnMap(BaseModel):
    """Maps raw price sheet headers to an item column and supplier identifiers.

    Attributes:
        item_column: Header of the description column (auto-detected if None)
        supplier_columns: Raw header -> supplier name. Empty means every other
            column is a supplier named after its header.
        ignore_columns: Headers to skip when supplier_columns is empty
    """
    item_column: Optional[str] = None
    supplier_columns: Dict[str, str] = Field(default_factory=dict)
    ignore_columns: List[str] = Field(default_factory=list)

    @field_validator('supplier_columns')
    @classmethod
    def validate_supplier_names(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Supplier names must be non-empty"""
        cleaned = {}
        for header, supplier in v.items():
            if not supplier or not supplier.strip():
                raise ValueError(f"Supplier name for column '{header}' must not be empty")
            cleaned[header.strip()] = supplier.strip()
        return cleaned

    def resolve(self, headers: Sequence[str]) -> Tuple[Optional[str], Dict[str, str]]:
        """Resolve the item column and supplier columns for a sheet.

        Args:
            headers: Sheet headers in column order

        Returns:
            Tuple of (item column or None if not found, {header: supplier name})
        """
        item_column = self.item_column
        if item_column is None:
            item_column = next(
                (h for h in headers if any(k in h.lower() for k in ITEM_COLUMN_KEYWORDS)),
                None
            )
        elif item_column not in headers:
            item_column = None

        if self.supplier_columns:
            suppliers = {h: s for h, s in self.supplier_columns.items() if h in headers}
        else:
            ignored = set(self.ignore_columns)
            suppliers = {
                h: h for h in headers
                if h != item_column and h not in ignored and not h.startswith("Unnamed:")
            }

        return item_column, suppliers


class PriceSheetImportError(BaseModel):
    """Single row error from a price sheet import"""
    row: int
    item: Optional[str] = None
    error: str


class PriceSheetImportResult(BaseModel):
    """Result of a price sheet import"""
    total_rows: int = 0
    product_count: int = 0
    entry_count: int = 0
    invalid_price_count: int = 0
    error_count: int = 0
    suppliers: List[str] = Field(default_factory=list)
    errors: List[PriceSheetImportError] = Field(default_factory=list)
    # CatalogEntry rows ready for build_catalog_index()
    entries: List[Any] = Field(default_factory=list, exclude=True)
