"""
Pricing Engine — final unit price for a catalog item.

Order of application:
  1. item-level percentage discount on the base price
  2. offer eligibility, checked against the price AFTER step 1
  3. offer discount (percentage with optional cap, or flat amount)
  4. floor at zero
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from amc_engine.engine.errors import InvalidInputError
from amc_engine.models.schemas import (
    FlatOffer,
    Offer,
    PercentageOffer,
    PriceBreakdown,
    Product,
)

logger = logging.getLogger(__name__)


def coerce_number(field: str, value: Any) -> float:
    """Missing values count as 0; anything else must be a finite number."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(field, f"expected a number, got {value!r}") from None
    if math.isnan(number) or math.isinf(number):
        raise InvalidInputError(field, f"expected a finite number, got {value!r}")
    return number


def _validate_offer(offer: Offer) -> None:
    if coerce_number("offer.discount_value", offer.discount_value) < 0:
        raise InvalidInputError("offer.discount_value", "must be >= 0")
    if isinstance(offer, PercentageOffer) and offer.max_discount_amount is not None:
        if coerce_number("offer.max_discount_amount", offer.max_discount_amount) < 0:
            raise InvalidInputError("offer.max_discount_amount", "must be >= 0")


def _offer_discount(offer: Offer, price: float) -> float:
    value = coerce_number("offer.discount_value", offer.discount_value)

    if isinstance(offer, PercentageOffer):
        amount = price * value / 100
        cap = coerce_number("offer.max_discount_amount", offer.max_discount_amount)
        # A zero cap means "no cap", as in the catalog admin
        if cap and amount > cap:
            amount = cap
        return amount

    if isinstance(offer, FlatOffer):
        return value

    raise TypeError(f"Unsupported offer type: {type(offer).__name__}")


def compute_item_price(
    base_price: Optional[float],
    discount_percent: Optional[float] = None,
    offer: Optional[Offer] = None,
) -> PriceBreakdown:
    """
    Compute the price breakdown for one unit of a catalog item.

    Raises InvalidInputError for a negative base price, a discount outside
    [0, 100] or a negative offer value. Inactive or ineligible offers are
    skipped and reported as `applied_offer=None`.
    """
    base = coerce_number("base_price", base_price)
    percent = coerce_number("discount_percent", discount_percent)

    if base < 0:
        raise InvalidInputError("base_price", f"must be >= 0, got {base}")
    if not 0 <= percent <= 100:
        raise InvalidInputError("discount_percent", f"must be within [0, 100], got {percent}")

    product_discount = base * percent / 100 if percent > 0 else 0.0
    after_product_discount = base - product_discount

    offer_discount = 0.0
    applied_offer: Optional[Offer] = None

    if offer is not None and offer.is_active:
        _validate_offer(offer)
        min_order = coerce_number("offer.min_order_amount", offer.min_order_amount)
        if min_order and after_product_discount < min_order:
            logger.debug(
                f"Offer {offer.id or offer.title or '?'} skipped: "
                f"{after_product_discount:.2f} below minimum {min_order:.2f}"
            )
        else:
            applied_offer = offer
            offer_discount = _offer_discount(offer, after_product_discount)

    final_price = max(0.0, after_product_discount - offer_discount)

    return PriceBreakdown(
        base_price=base,
        product_discount_amount=product_discount,
        offer_discount_amount=offer_discount,
        final_price=final_price,
        applied_offer=applied_offer,
    )


def resolve_offer(product: Product, offers: Mapping[str, Offer] | None) -> Optional[Offer]:
    """Look up the product's referenced offer; unknown ids resolve to None."""
    if not product.offer_id or not offers:
        return None
    return offers.get(product.offer_id)


class PricingEngine:
    """Prices catalog items against the offers currently in the catalog."""

    def compute_item_price(
        self,
        base_price: Optional[float],
        discount_percent: Optional[float] = None,
        offer: Optional[Offer] = None,
    ) -> PriceBreakdown:
        return compute_item_price(base_price, discount_percent, offer)

    def price_product(
        self,
        product: Product,
        offers: Mapping[str, Offer] | None = None,
    ) -> PriceBreakdown:
        """Price a product record, resolving its offer from `offers`."""
        offer = resolve_offer(product, offers)
        if product.offer_id and offer is None:
            logger.debug(f"Product {product.id}: offer {product.offer_id} not in catalog")

        breakdown = compute_item_price(product.base_price, product.discount_percent, offer)
        logger.debug(
            f"Priced product {product.id}: base={breakdown.base_price:.2f} "
            f"item_disc={breakdown.product_discount_amount:.2f} "
            f"offer_disc={breakdown.offer_discount_amount:.2f} "
            f"final={breakdown.final_price:.2f}"
        )
        return breakdown
