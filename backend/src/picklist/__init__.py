"""Picklist domain module: order items in, priced picklist lines out"""

from .models import (
    NO_PRICE,
    NO_SUPPLIER,
    NOT_AVAILABLE,
    OrderItem,
    PicklistLine,
    PicklistSummary,
)
from .assembler import PicklistAssembler, build_line, line_total
from .validation import (
    OrderItemIssue,
    OrderItemValidation,
    PicklistValidation,
    validate_order_items,
    validate_picklist,
)
from .schemas import PicklistLineSchema, PicklistSummarySchema, PicklistResponse

__all__ = [
    "NO_PRICE",
    "NO_SUPPLIER",
    "NOT_AVAILABLE",
    "OrderItem",
    "PicklistLine",
    "PicklistSummary",
    "PicklistAssembler",
    "build_line",
    "line_total",
    "OrderItemIssue",
    "OrderItemValidation",
    "PicklistValidation",
    "validate_order_items",
    "validate_picklist",
    "PicklistLineSchema",
    "PicklistSummarySchema",
    "PicklistResponse",
]
