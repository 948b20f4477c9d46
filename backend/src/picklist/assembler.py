"""Picklist assembly.

Turns order items into picklist lines (one match per item, input order kept)
and computes summary totals for renderers.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Sequence

from matching.ports import MatcherPort, MatcherError, MatchResult
from observability.metrics import picklist_lines_total
from observability.run_context import generate_run_id, get_run_id, reset_run_id, set_run_id

from .models import (
    NO_PRICE,
    NO_SUPPLIER,
    NOT_AVAILABLE,
    OrderItem,
    PicklistLine,
    PicklistSummary,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def line_total(unit_price: Decimal, quantity: int) -> str:
    """unit_price * quantity rounded half-up to cents, e.g. 1.25 x 4 -> "5.00" """
    return str((unit_price * quantity).quantize(CENTS, rounding=ROUND_HALF_UP))


def build_line(item: OrderItem, result: MatchResult) -> PicklistLine:
    """Combine an order item with its match result.

    Args:
        item: Order item
        result: Match result for item.raw_description

    Returns:
        PicklistLine with sentinels for missing supplier/price
    """
    if result.has_price:
        supplier = result.supplier_name
        unit_price = result.unit_price
        total_price = line_total(result.unit_price, item.quantity)
    else:
        supplier = NO_SUPPLIER
        unit_price = NO_PRICE
        total_price = NOT_AVAILABLE

    return PicklistLine(
        quantity=item.quantity,
        original_item=item.raw_description,
        selected_supplier=supplier,
        unit_price=unit_price,
        total_price=total_price,
        matched_product_id=result.matched_product_id,
        matched_description=result.matched_description,
        match_score=result.match_score,
        method=result.method.value if result.method else None,
        is_preference=result.is_preference
    )


class PicklistAssembler:
    """Build picklists from order items with a matcher.

    Args:
        matcher: Any MatcherPort (MatchingEngine or PreferenceAwareMatcher)
    """

    def __init__(self, matcher: MatcherPort):
        if matcher is None:
            raise MatcherError("A matcher is required to assemble a picklist")
        self.matcher = matcher

    def assemble(self, order_items: Sequence[OrderItem]) -> List[PicklistLine]:
        """Match every order item and build picklist lines.

        Each call runs under a fresh run id for log correlation.

        Args:
            order_items: Validated order items

        Returns:
            One PicklistLine per order item, in input order

        Raises:
            MatcherError: If the matcher fails or returns the wrong number of results
        """
        token = set_run_id(generate_run_id())
        try:
            items = list(order_items)
            logger.info(f"Assembling picklist for {len(items)} items", extra={"item_count": len(items)})

            results = self.matcher.match_batch([item.raw_description for item in items])
            if len(results) != len(items):
                raise MatcherError(
                    f"Matcher returned {len(results)} results for {len(items)} items"
                )

            lines = [build_line(item, result) for item, result in zip(items, results)]

            priced = sum(1 for line in lines if line.has_supplier)
            picklist_lines_total.labels(status="priced").inc(priced)
            picklist_lines_total.labels(status="unpriced").inc(len(lines) - priced)

            logger.info(
                f"Completed picklist run {get_run_id()}: {priced}/{len(lines)} items with suppliers",
                extra={"item_count": len(lines)}
            )
            return lines
        finally:
            reset_run_id(token)

    @staticmethod
    def summarize(lines: Sequence[PicklistLine]) -> PicklistSummary:
        """Calculate picklist summary statistics.

        Args:
            lines: Picklist lines

        Returns:
            PicklistSummary; "N/A" totals are ignored in cost sums
        """
        summary = PicklistSummary(total_items=len(lines))
        total_cost = Decimal("0")

        for line in lines:
            summary.total_quantity += line.quantity

            if line.has_supplier:
                summary.items_with_suppliers += 1
            else:
                summary.unmatched_items += 1

            if line.is_preference:
                summary.preference_matches += 1

            cost = _numeric_total(line.total_price)
            if cost is None:
                continue

            total_cost += cost
            if line.has_supplier:
                breakdown = summary.supplier_breakdown
                breakdown[line.selected_supplier] = breakdown.get(line.selected_supplier, Decimal("0")) + cost

        summary.total_cost = total_cost.quantize(CENTS, rounding=ROUND_HALF_UP)
        summary.supplier_breakdown = {
            supplier: amount.quantize(CENTS, rounding=ROUND_HALF_UP)
            for supplier, amount in summary.supplier_breakdown.items()
        }
        return summary


def _numeric_total(value) -> Optional[Decimal]:
    if value is None or value == NOT_AVAILABLE:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None
