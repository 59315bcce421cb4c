"""
EntitlementEngine — the ONLY class callers should import.

This is the facade over:
  • PricingEngine       (item price: item discount → offer → floor)
  • OrderAggregator     (line unit prices and order totals)
  • ContractLifecycle   (status / progress / dashboard counters)
  • RenewalProcessor    (create and renew AMC / rental contracts)

All methods are synchronous and pure; `now` is always supplied by the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping, Optional

from amc_engine.models.enums import ContractStatus
from amc_engine.models.schemas import (
    Contract,
    ContractDashboard,
    ContractStatusView,
    Offer,
    OrderLineItem,
    OrderQuote,
    PlanInput,
    PriceBreakdown,
    Product,
    RenewalInput,
    RenewalResult,
)

from .lifecycle import ContractLifecycle
from .orders import OrderAggregator
from .pricing import PricingEngine
from .renewal import RenewalProcessor

logger = logging.getLogger(__name__)


class EntitlementEngine:
    """
    Facade over pricing and contract computations.

    Usage:
        from amc_engine.engine import EntitlementEngine
        engine = EntitlementEngine()
        breakdown = engine.quote_product(product, offers)
        view = engine.contract_status(contract, now)
    """

    def __init__(self, expiring_soon_days: Optional[int] = None):
        self.pricing = PricingEngine()
        self.orders = OrderAggregator(self.pricing)
        self.lifecycle = ContractLifecycle(expiring_soon_days)
        self.renewals = RenewalProcessor(self.lifecycle)

    # ── Pricing ──────────────────────────────────────────

    def quote_product(
        self,
        product: Product,
        offers: Mapping[str, Offer] | None = None,
    ) -> PriceBreakdown:
        return self.pricing.price_product(product, offers)

    def quote_order(
        self,
        items: Iterable[OrderLineItem],
        offers: Mapping[str, Offer] | None = None,
        merge_duplicates: bool = True,
    ) -> OrderQuote:
        """Price an order; duplicate product + add-on lines are merged first."""
        if merge_duplicates:
            items = self.orders.merge_line_items(items)
        return self.orders.price_order(items, offers)

    # ── Contracts ────────────────────────────────────────

    def contract_status(self, contract: Contract, now: datetime) -> ContractStatusView:
        return self.lifecycle.status_view(contract, now)

    def dashboard(
        self,
        contracts: Iterable[Contract],
        now: datetime,
        status: ContractStatus | str | None = None,
    ) -> ContractDashboard:
        selected = self.lifecycle.filter_by_status(contracts, status, now)
        return self.lifecycle.summarize(selected, now)

    def create_contract(
        self,
        customer_ref: Optional[str],
        plan: PlanInput,
        now: datetime,
    ) -> Contract:
        return self.renewals.create_contract(customer_ref, plan, now)

    def renew_contract(
        self,
        current: Optional[Contract],
        renewal: RenewalInput,
        now: datetime,
    ) -> RenewalResult:
        return self.renewals.renew(current, renewal, now)
