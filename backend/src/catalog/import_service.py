"""Price sheet import service

Reads supplier price sheets (CSV or Excel) where one column holds the product
description and the remaining columns hold one supplier's price each, and
turns them into CatalogEntry rows.

Supplier columns are resolved through SupplierColumnMap before any entry is
built, so the matching code never sees raw sheet headers.
"""

import csv
import logging
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional

import chardet
import pandas as pd

from pricing.service import parse_price

from .index import CatalogError
from .models import CatalogEntry
from .schemas import PriceSheetImportError, PriceSheetImportResult, SupplierColumnMap

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


class PriceSheetImportService:
    """Service for importing catalog rows from supplier price sheets"""

    def __init__(self, column_map: Optional[SupplierColumnMap] = None):
        self.column_map = column_map or SupplierColumnMap()

    def parse_sheet(self, file_bytes: bytes, filename: str = "prices.csv") -> pd.DataFrame:
        """Parse a price sheet into a DataFrame of raw cells.

        Args:
            file_bytes: Raw file content
            filename: Original filename, used to pick CSV or Excel parsing

        Returns:
            DataFrame with stripped string headers

        Raises:
            CatalogError: If the sheet is empty, malformed or of an unsupported type
        """
        suffix = Path(filename).suffix.lower()

        try:
            if suffix in EXCEL_SUFFIXES:
                df = pd.read_excel(BytesIO(file_bytes), sheet_name=0, dtype=object, engine="openpyxl")
            elif suffix in ("", ".csv", ".txt"):
                df = pd.read_csv(StringIO(self._decode(file_bytes)), dtype=str, keep_default_na=False)
            else:
                raise CatalogError(f"Unsupported price sheet type: {suffix}")
        except pd.errors.EmptyDataError:
            raise CatalogError("Price sheet is empty")
        except pd.errors.ParserError as e:
            raise CatalogError(f"Price sheet parsing error: {str(e)}")
        except (ValueError, KeyError) as e:
            raise CatalogError(f"Could not read price sheet: {str(e)}")

        df.columns = [str(c).strip() for c in df.columns]
        if df.empty:
            raise CatalogError("Price sheet is empty")
        return df

    def _decode(self, file_bytes: bytes) -> str:
        detected = chardet.detect(file_bytes)
        encoding = detected['encoding'] or 'utf-8'
        try:
            return file_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return file_bytes.decode('utf-8', errors='replace')

    def import_file(self, file_bytes: bytes, filename: str = "prices.csv") -> PriceSheetImportResult:
        """Import a price sheet file.

        Args:
            file_bytes: Raw file content
            filename: Original filename

        Returns:
            PriceSheetImportResult with CatalogEntry rows and row errors

        Raises:
            CatalogError: If the sheet cannot be read or has no item column
        """
        return self.import_dataframe(self.parse_sheet(file_bytes, filename))

    def import_dataframe(self, df: pd.DataFrame) -> PriceSheetImportResult:
        """Import price rows from an already parsed sheet.

        Rows with the same description are one product; if a supplier appears
        twice for it, the lowest valid price is kept.

        Args:
            df: Sheet with one row per product

        Returns:
            PriceSheetImportResult with CatalogEntry rows and row errors

        Raises:
            CatalogError: If no item column can be resolved
        """
        headers = [str(c) for c in df.columns]
        item_column, supplier_columns = self.column_map.resolve(headers)
        if item_column is None:
            raise CatalogError(
                "Could not find the item column (expected a header containing "
                "'item', 'product', 'name' or 'description')"
            )

        result = PriceSheetImportResult(suppliers=sorted(set(supplier_columns.values())))
        product_ids: Dict[str, int] = {}
        offers: Dict[tuple, Any] = {}

        for row_num, (_, row) in enumerate(df.iterrows(), start=2):  # Row 1 is the header
            result.total_rows += 1
            description = _cell_text(row.get(item_column))

            if not description:
                result.error_count += 1
                result.errors.append(PriceSheetImportError(row=row_num, error="Item description is required"))
                continue

            cells = {
                supplier: _cell_text(row.get(header))
                for header, supplier in supplier_columns.items()
            }
            cells = {supplier: cell for supplier, cell in cells.items() if cell}
            if not cells:
                result.error_count += 1
                result.errors.append(PriceSheetImportError(
                    row=row_num, item=description, error="No supplier prices"
                ))
                continue

            product_id = product_ids.setdefault(description, len(product_ids) + 1)

            for supplier, cell in cells.items():
                price = parse_price(cell)
                if price is None:
                    result.invalid_price_count += 1
                    logger.warning(f"Row {row_num}: invalid price '{cell}' for supplier '{supplier}'")

                key = (product_id, supplier)
                if key not in offers:
                    offers[key] = price
                elif price is not None and (offers[key] is None or price < offers[key]):
                    offers[key] = price

        result.entries = self._build_entries(product_ids, offers)
        result.product_count = len(product_ids)
        result.entry_count = len(result.entries)

        logger.info(
            f"Imported {result.entry_count} catalog rows for {result.product_count} products "
            f"from {result.total_rows} sheet rows ({result.error_count} errors)"
        )
        return result

    def _build_entries(self, product_ids: Dict[str, int], offers: Dict[tuple, Any]) -> List[CatalogEntry]:
        descriptions = {pid: desc for desc, pid in product_ids.items()}
        return [
            CatalogEntry(
                product_id=product_id,
                description=descriptions[product_id],
                supplier_name=supplier,
                price=price
            )
            for (product_id, supplier), price in sorted(offers.items(), key=lambda kv: kv[0])
        ]


def generate_error_csv(result: PriceSheetImportResult) -> str:
    """Generate CSV string with import errors

    Args:
        result: Import result containing errors

    Returns:
        CSV string with error rows
    """
    output = StringIO()
    writer = csv.writer(output)

    writer.writerow(["Row", "Item", "Error"])
    for error in result.errors:
        writer.writerow([error.row, error.item or "", error.error])

    return output.getvalue()
