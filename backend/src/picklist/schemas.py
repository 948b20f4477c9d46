"""Pydantic schemas for picklist output.

Consumed by external renderers (CSV, PDF, JSON responses).
"""

from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .models import PicklistLine, PicklistSummary


class PicklistLineSchema(BaseModel):
    """Single picklist line"""
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

    class Config:
        from_attributes = True


class PicklistSummarySchema(BaseModel):
    """Picklist totals"""
    total_items: int
    items_with_suppliers: int
    total_cost: Decimal
    total_quantity: int = 0
    unmatched_items: int = 0
    preference_matches: int = 0
    supplier_breakdown: Dict[str, Decimal] = Field(default_factory=dict)

    class Config:
        from_attributes = True


class PicklistResponse(BaseModel):
    """Complete picklist with summary"""
    lines: List[PicklistLineSchema]
    summary: PicklistSummarySchema

    @classmethod
    def build(cls, lines: List[PicklistLine], summary: PicklistSummary) -> "PicklistResponse":
        return cls(
            lines=[PicklistLineSchema.model_validate(line) for line in lines],
            summary=PicklistSummarySchema.model_validate(summary)
        )
