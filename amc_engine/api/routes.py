"""
API routes — thin, stateless HTTP layer that delegates to the engine.

Routes:
  GET  /health                    → API health check
  POST /api/pricing/quote         → Price breakdown for one product
  POST /api/orders/quote          → Line prices and order total
  POST /api/contracts/status      → Status / progress view of a contract
  POST /api/contracts/dashboard   → Counters over a set of contracts
  POST /api/contracts/create      → New AMC / rental contract
  POST /api/contracts/renew       → Renewed contract + appended history entry

Each request may carry `now`; when omitted the route uses the current UTC time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from amc_engine.config import get_settings
from amc_engine.engine import EntitlementEngine, InvalidInputError
from amc_engine.models.schemas import (
    Contract,
    ContractDashboard,
    ContractStatusView,
    EngineModel,
    Offer,
    OrderLineItem,
    OrderQuote,
    PlanInput,
    PriceBreakdown,
    Product,
    RenewalInput,
    RenewalResult,
)

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
pricing_router = APIRouter()
contracts_router = APIRouter()


def get_engine() -> EntitlementEngine:
    return EntitlementEngine(get_settings().expiring_soon_days)


def _now(value: Optional[datetime]) -> datetime:
    return value if value is not None else datetime.now(timezone.utc)


# ── Request schemas ──────────────────────────────────────
class ProductQuoteRequest(EngineModel):
    product: Product
    offer: Optional[Offer] = None


class OrderQuoteRequest(EngineModel):
    items: list[OrderLineItem]
    offers: list[Offer] = []
    merge_duplicates: bool = True


class ContractStatusRequest(EngineModel):
    contract: Contract
    now: Optional[datetime] = None


class DashboardRequest(EngineModel):
    contracts: list[Contract] = []
    status: Optional[str] = None
    now: Optional[datetime] = None


class CreateContractRequest(EngineModel):
    customer_ref: Optional[str] = Field(
        default=None, description="Customer id the new contract belongs to"
    )
    plan: PlanInput
    now: Optional[datetime] = None


class RenewContractRequest(EngineModel):
    contract: Optional[Contract] = None
    renewal: RenewalInput
    now: Optional[datetime] = None


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check() -> dict[str, Any]:
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Pricing ──────────────────────────────────────────────

@pricing_router.post("/pricing/quote", response_model=PriceBreakdown)
def quote_product(
    req: ProductQuoteRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> PriceBreakdown:
    offers = {}
    if req.offer is not None:
        # The offer is passed inline, so bind it to the product's reference
        key = req.product.offer_id or req.offer.id or "_inline"
        offers[key] = req.offer
        product = req.product.model_copy(update={"offer_id": key})
    else:
        product = req.product
    return engine.quote_product(product, offers)


@pricing_router.post("/orders/quote", response_model=OrderQuote)
def quote_order(
    req: OrderQuoteRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> OrderQuote:
    offers = {}
    for index, offer in enumerate(req.offers):
        # Lines reference offers by id
        if not offer.id:
            raise InvalidInputError(f"offers[{index}].id", "offer id is required")
        offers[offer.id] = offer
    return engine.quote_order(req.items, offers, merge_duplicates=req.merge_duplicates)


# ── Contracts ────────────────────────────────────────────

@contracts_router.post("/status", response_model=ContractStatusView)
def contract_status(
    req: ContractStatusRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> ContractStatusView:
    return engine.contract_status(req.contract, _now(req.now))


@contracts_router.post("/dashboard", response_model=ContractDashboard)
def contract_dashboard(
    req: DashboardRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> ContractDashboard:
    return engine.dashboard(req.contracts, _now(req.now), req.status)


@contracts_router.post("/create", response_model=Contract)
def create_contract(
    req: CreateContractRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> Contract:
    return engine.create_contract(req.customer_ref, req.plan, _now(req.now))


@contracts_router.post("/renew", response_model=RenewalResult)
def renew_contract(
    req: RenewContractRequest,
    engine: EntitlementEngine = Depends(get_engine),
) -> RenewalResult:
    return engine.renew_contract(req.contract, req.renewal, _now(req.now))
