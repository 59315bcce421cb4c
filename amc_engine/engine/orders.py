"""
Order Aggregator — per-line unit prices and order totals.

unit_price = discounted product price + add-on price (add-on never discounted)
total      = Σ unit_price · quantity

Every call re-prices from the records passed in; nothing is cached, so a
checkout always reflects the offers current at that moment.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from amc_engine.engine.errors import InvalidInputError
from amc_engine.engine.pricing import PricingEngine, coerce_number
from amc_engine.models.schemas import (
    Offer,
    OrderLineItem,
    OrderQuote,
    PricedLine,
)

logger = logging.getLogger(__name__)


class OrderAggregator:
    """Folds priced lines into an order quote."""

    def __init__(self, pricing: Optional[PricingEngine] = None):
        self._pricing = pricing or PricingEngine()

    def price_line(
        self,
        item: OrderLineItem,
        offers: Mapping[str, Offer] | None = None,
    ) -> PricedLine:
        if item.quantity < 1:
            raise InvalidInputError("quantity", f"must be >= 1, got {item.quantity}")

        add_on_price = 0.0
        if item.add_on is not None:
            add_on_price = coerce_number("add_on.price", item.add_on.price)
            if add_on_price < 0:
                raise InvalidInputError("add_on.price", f"must be >= 0, got {add_on_price}")

        breakdown = self._pricing.price_product(item.product, offers)
        unit_price = breakdown.final_price + add_on_price

        return PricedLine(
            product_id=item.product.id,
            product_name=item.product.name,
            quantity=item.quantity,
            breakdown=breakdown,
            add_on_id=item.add_on.id if item.add_on else None,
            add_on_name=item.add_on.name if item.add_on else None,
            add_on_price=add_on_price,
            unit_price=unit_price,
            line_total=unit_price * item.quantity,
        )

    def price_order(
        self,
        items: Iterable[OrderLineItem],
        offers: Mapping[str, Offer] | None = None,
    ) -> OrderQuote:
        lines = [self.price_line(item, offers) for item in items]
        total = sum((line.line_total for line in lines), 0.0)
        logger.debug(f"Priced order: {len(lines)} lines, total={total:.2f}")
        return OrderQuote(lines=lines, total=total)

    @staticmethod
    def merge_line_items(items: Iterable[OrderLineItem]) -> list[OrderLineItem]:
        """
        Collapse lines for the same product + add-on into one line,
        summing quantities and keeping first-seen order.
        Lines whose product has no id are never merged.
        """
        merged: list[OrderLineItem] = []
        index: dict[tuple[str, Optional[str]], int] = {}

        for item in items:
            if item.product.id is None:
                merged.append(item)
                continue
            key = (item.product.id, item.add_on.id if item.add_on else None)
            if key in index:
                pos = index[key]
                merged[pos] = merged[pos].model_copy(
                    update={"quantity": merged[pos].quantity + item.quantity}
                )
            else:
                index[key] = len(merged)
                merged.append(item)

        return merged
