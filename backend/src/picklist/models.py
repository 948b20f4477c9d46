"""Picklist domain models"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional, Union

NO_SUPPLIER = "No supplier found"
NO_PRICE = "No price found"
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class OrderItem:
    """One order line as extracted by an order parser.

    Attributes:
        quantity: Ordered quantity (validated upstream, see validate_order_items)
        raw_description: Item text as it appeared on the order
    """
    quantity: int
    raw_description: str


@dataclass(frozen=True)
class PicklistLine:
    """One picklist output line.

    Unmatched or unpriced lines carry the sentinel strings instead of None so
    renderers can print them directly.

    Attributes:
        quantity: Ordered quantity
        original_item: Item text as it appeared on the order
        selected_supplier: Cheapest supplier, or "No supplier found"
        unit_price: Supplier price, or "No price found"
        total_price: unit_price * quantity with 2 decimals, or "N/A"
        matched_product_id: Catalog product (None if unmatched)
        matched_description: Catalog description (None if unmatched)
        match_score: Score within the winning strategy tier
        method: Winning strategy tier value
        is_preference: True if a learned preference decided the line
    """
    quantity: int
    original_item: str
    selected_supplier: str
    unit_price: Union[Decimal, str]
    total_price: str
    matched_product_id: Optional[int] = None
    matched_description: Optional[str] = None
    match_score: int = 0
    method: Optional[str] = None
    is_preference: bool = False

    @property
    def has_supplier(self) -> bool:
        return self.selected_supplier != NO_SUPPLIER


@dataclass
class PicklistSummary:
    """Totals across a picklist.

    total_cost only includes lines with a numeric total_price.
    """
    total_items: int = 0
    items_with_suppliers: int = 0
    total_cost: Decimal = Decimal("0.00")
    total_quantity: int = 0
    unmatched_items: int = 0
    preference_matches: int = 0
    supplier_breakdown: Dict[str, Decimal] = field(default_factory=dict)
