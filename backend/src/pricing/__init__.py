"""Pricing domain module for supplier price selection"""

from .service import PriceService, PriceSelection, SupplierOffer, parse_price

__all__ = [
    "PriceService",
    "PriceSelection",
    "SupplierOffer",
    "parse_price",
]
