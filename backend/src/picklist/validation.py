"""Order item and picklist validation.

validate_order_items is the ingestion-side filter: the matcher trusts its
input apart from rejecting too-short descriptions, so quantities must be
checked here before assembling a picklist.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from config import Settings, get_settings

from .models import NO_PRICE, NO_SUPPLIER, OrderItem, PicklistLine


@dataclass
class OrderItemIssue:
    """Why an order item was rejected"""
    index: int
    item: OrderItem
    reason: str


@dataclass
class OrderItemValidation:
    """Order items split into accepted and rejected"""
    valid: List[OrderItem] = field(default_factory=list)
    rejected: List[OrderItemIssue] = field(default_factory=list)


@dataclass
class PicklistValidation:
    """Result of picklist validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def validate_order_items(
    items: Sequence[OrderItem],
    settings: Optional[Settings] = None
) -> OrderItemValidation:
    """Reject order items with an out-of-range quantity or a too-short description.

    Args:
        items: Order items from an order parser
        settings: Settings with ORDER_QTY_MIN/MAX and MATCH_MIN_QUERY_LENGTH

    Returns:
        OrderItemValidation keeping the accepted items in input order
    """
    settings = settings or get_settings()
    result = OrderItemValidation()

    for index, item in enumerate(items):
        reason = None
        quantity = item.quantity

        if not isinstance(quantity, int) or isinstance(quantity, bool):
            reason = f"Invalid quantity '{quantity}'"
        elif quantity < settings.ORDER_QTY_MIN or quantity > settings.ORDER_QTY_MAX:
            reason = (
                f"Quantity {quantity} outside allowed range "
                f"{settings.ORDER_QTY_MIN}-{settings.ORDER_QTY_MAX}"
            )
        elif len((item.raw_description or "").strip()) < settings.MATCH_MIN_QUERY_LENGTH:
            reason = "Item description missing or too short"

        if reason:
            result.rejected.append(OrderItemIssue(index=index, item=item, reason=reason))
        else:
            result.valid.append(item)

    return result


def validate_picklist(lines: Sequence[PicklistLine]) -> PicklistValidation:
    """Check a picklist before export.

    Missing item text or quantity is an error; a missing supplier or price is
    only a warning.

    Args:
        lines: Picklist lines

    Returns:
        PicklistValidation with errors and warnings (1-based line numbers)
    """
    errors = []
    warnings = []

    for number, line in enumerate(lines, start=1):
        if not line.original_item or not isinstance(line.original_item, str):
            errors.append(f"Item {number}: Missing or invalid item name")

        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity <= 0:
            errors.append(f"Item {number}: Missing or invalid quantity")

        if line.selected_supplier == NO_SUPPLIER:
            warnings.append(f'Item {number}: No supplier found for "{line.original_item}"')

        if line.unit_price == NO_PRICE:
            warnings.append(f'Item {number}: No price found for "{line.original_item}"')

    return PicklistValidation(is_valid=not errors, errors=errors, warnings=warnings)
