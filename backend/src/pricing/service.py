"""Supplier price selection service

Implements:
- Price parsing for raw price sheet cells ("$3.96", "@ 1,200.50", numbers)
- Lowest-price supplier selection across candidate catalog rows
- Alternative offers for the matched product (cheapest first)

Rows without a usable price (missing, non-numeric, zero or negative) are
skipped, never reported as errors: partial price lists are normal.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from catalog.models import CatalogEntry

_PRICE_NOISE = re.compile(r"[@$,\s]")


@dataclass(frozen=True)
class SupplierOffer:
    """A supplier's price for one product"""
    supplier_name: str
    price: Decimal
    product_id: int


@dataclass(frozen=True)
class PriceSelection:
    """Result of best price selection.

    supplier_name and price are both set or both None.
    entry is the winning catalog row (None when no valid price exists).
    """
    supplier_name: Optional[str] = None
    price: Optional[Decimal] = None
    entry: Optional[CatalogEntry] = None

    @property
    def found(self) -> bool:
        return self.price is not None


def parse_price(value: Any) -> Optional[Decimal]:
    """Parse a raw price value into a positive Decimal.

    Args:
        value: Decimal, int, float or string such as "$3.96" or "@1,200.50"

    Returns:
        Positive Decimal, or None if the value is missing, non-numeric or <= 0
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, (int, float)):
        price = Decimal(str(value))
    else:
        cleaned = _PRICE_NOISE.sub("", str(value))
        if not cleaned:
            return None
        try:
            price = Decimal(cleaned)
        except InvalidOperation:
            return None

    if not price.is_finite() or price <= 0:
        return None
    return price


class PriceService:
    """Service for supplier price operations"""

    @staticmethod
    def select_best_price(candidates: Sequence[CatalogEntry]) -> PriceSelection:
        """Select the cheapest valid supplier offer among candidate rows.

        Algorithm:
        1. Discard rows whose price is missing, non-numeric, zero or negative
        2. Return the row with the lowest price
        3. Equal prices are broken by product_id, then supplier_name

        Args:
            candidates: Catalog rows of the winning match strategy

        Returns:
            PriceSelection with supplier and price, or an empty PriceSelection
            if no candidate has a valid price
        """
        best = None
        best_key = None

        for entry in candidates:
            price = parse_price(entry.price)
            if price is None:
                continue

            key = (price, entry.product_id, entry.supplier_name)
            if best_key is None or key < best_key:
                best_key = key
                best = entry

        if best is None:
            return PriceSelection()

        return PriceSelection(supplier_name=best.supplier_name, price=best_key[0], entry=best)

    @staticmethod
    def alternative_offers(
        entries: Sequence[CatalogEntry],
        exclude_supplier: Optional[str] = None,
        limit: int = 3
    ) -> List[SupplierOffer]:
        """Get other supplier offers for a product, cheapest first.

        Args:
            entries: Supplier rows of one product
            exclude_supplier: Supplier already selected (left out of the list)
            limit: Max offers to return

        Returns:
            List of SupplierOffer sorted by price, then supplier name
        """
        offers = []
        for entry in entries:
            if entry.supplier_name == exclude_supplier:
                continue
            price = parse_price(entry.price)
            if price is None:
                continue
            offers.append(SupplierOffer(
                supplier_name=entry.supplier_name,
                price=price,
                product_id=entry.product_id
            ))

        offers.sort(key=lambda o: (o.price, o.supplier_name))
        return offers[:max(limit, 0)]
