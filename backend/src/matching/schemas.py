"""Pydantic schemas for match results.

Used by consumers that serialize match results (JSON responses, preview UIs).
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .ports import MatchCandidate, MatchResult


class SupplierOfferSchema(BaseModel):
    """Alternative supplier offer"""
    supplier_name: str
    price: Decimal = Field(gt=0)
    product_id: int

    class Config:
        from_attributes = True


class MatchCandidateSchema(BaseModel):
    """Preview candidate with score and best offer"""
    product_id: int
    description: str
    score: int = Field(ge=0)
    method: str
    best_supplier: Optional[str] = None
    best_price: Optional[Decimal] = None

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "MatchCandidateSchema":
        return cls(
            product_id=candidate.product_id,
            description=candidate.description,
            score=candidate.score,
            method=candidate.method.value,
            best_supplier=candidate.best_supplier,
            best_price=candidate.best_price
        )


class MatchResultSchema(BaseModel):
    """Result of matching one order item"""
    matched_product_id: Optional[int] = None
    supplier_name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    match_score: int = Field(default=0, ge=0)
    matched_description: Optional[str] = None
    method: Optional[str] = None
    is_preference: bool = False
    alternatives: List[SupplierOfferSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: MatchResult) -> "MatchResultSchema":
        return cls(
            matched_product_id=result.matched_product_id,
            supplier_name=result.supplier_name,
            unit_price=result.unit_price,
            match_score=result.match_score,
            matched_description=result.matched_description,
            method=result.method.value if result.method else None,
            is_preference=result.is_preference,
            alternatives=[SupplierOfferSchema.model_validate(o) for o in result.alternatives]
        )
