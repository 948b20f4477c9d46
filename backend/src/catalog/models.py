"""Catalog domain models"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from .normalization import normalize_item_name


@dataclass(frozen=True)
class CatalogEntry:
    """One catalog row: a product offered by one supplier.

    Several entries may share a product_id (one per supplier). The normalized
    description is derived once here so matching never re-normalizes the catalog.

    Attributes:
        product_id: Stable identifier of a distinct product description
        description: Original free-text product description
        supplier_name: Supplier identifier (mapped from a price sheet column or DB row)
        price: Offer price, or None when the supplier has no offer for this product
        normalized_description: Cached normalize_item_name(description)
    """
    product_id: int
    description: str
    supplier_name: str
    price: Optional[Decimal] = None
    normalized_description: str = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "normalized_description", normalize_item_name(self.description))
