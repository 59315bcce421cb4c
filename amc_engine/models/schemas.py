"""
Records consumed and views produced by the engine.

Input records mirror the catalog / customer API payloads (camelCase keys on
the wire, snake_case in Python). Derived views are rebuilt on every call and
never stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from amc_engine.config import get_settings
from amc_engine.utils.dates import to_utc

from .enums import ContractKind, ContractStatus, DiscountType, PaymentStatus


def _blank_to_none(value: Any) -> Any:
    """Form fields arrive as "" when left empty; treat that as missing."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _optional_instant(value: Any) -> Any:
    value = _blank_to_none(value)
    return None if value is None else to_utc(value)


class EngineModel(BaseModel):
    """Base for every record: accepts camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Catalog ──────────────────────────────────────────────


class _OfferBase(EngineModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    title: Optional[str] = None
    discount_value: Optional[float] = None
    min_order_amount: Optional[float] = None
    is_active: bool = False

    @field_validator("discount_value", "min_order_amount", mode="before")
    @classmethod
    def _blank_numbers(cls, v: Any) -> Any:
        return _blank_to_none(v)


class PercentageOffer(_OfferBase):
    """Percent of the already-discounted price, optionally capped."""
    discount_type: Literal["percentage"] = "percentage"
    max_discount_amount: Optional[float] = None

    @field_validator("max_discount_amount", mode="before")
    @classmethod
    def _blank_cap(cls, v: Any) -> Any:
        return _blank_to_none(v)


class FlatOffer(_OfferBase):
    """Fixed amount off the unit price. Never capped, never prorated."""
    discount_type: Literal["flat"] = "flat"


def parse_offer(record: Any) -> Any:
    """Build the right offer variant from a raw promotions record."""
    if isinstance(record, (PercentageOffer, FlatOffer)) or not isinstance(record, dict):
        return record

    raw_type = record.get("discountType", record.get("discount_type"))
    kind = str(raw_type or "").strip().lower()
    data = {k: v for k, v in record.items() if k not in ("discountType", "discount_type")}
    if kind == DiscountType.PERCENTAGE.value:
        return PercentageOffer.model_validate({**data, "discountType": kind})
    if kind == DiscountType.FLAT.value:
        data = {k: v for k, v in data.items() if k not in ("maxDiscountAmount", "max_discount_amount")}
        return FlatOffer.model_validate({**data, "discountType": kind})
    raise ValueError(f"Unknown discountType {raw_type!r}; expected 'percentage' or 'flat'")


Offer = Annotated[Union[PercentageOffer, FlatOffer], BeforeValidator(parse_offer)]


class Product(EngineModel):
    """A catalog product or RO part as far as pricing is concerned."""
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: Optional[str] = None
    base_price: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("basePrice", "base_price", "price", "sellingPrice"),
    )
    discount_percent: Optional[float] = None
    offer_id: Optional[str] = None

    @field_validator("base_price", "discount_percent", "offer_id", mode="before")
    @classmethod
    def _blanks(cls, v: Any) -> Any:
        return _blank_to_none(v)


class PriceBreakdown(EngineModel):
    base_price: float = 0.0
    product_discount_amount: float = 0.0
    offer_discount_amount: float = 0.0
    final_price: float = 0.0
    applied_offer: Optional[Offer] = None


# ── Orders ───────────────────────────────────────────────


class AddOn(EngineModel):
    """Flat-priced extra bundled on an order line (e.g. an AMC plan)."""
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: Optional[str] = None
    price: Optional[float] = None

    @field_validator("price", mode="before")
    @classmethod
    def _blank_price(cls, v: Any) -> Any:
        return _blank_to_none(v)


class OrderLineItem(EngineModel):
    product: Product
    quantity: int = 1
    add_on: Optional[AddOn] = None


class PricedLine(EngineModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int
    breakdown: PriceBreakdown
    add_on_id: Optional[str] = None
    add_on_name: Optional[str] = None
    add_on_price: float = 0.0
    unit_price: float
    line_total: float


class OrderQuote(EngineModel):
    lines: list[PricedLine] = []
    total: float = 0.0


# ── Contracts (AMC / Rental) ─────────────────────────────


class HistoryEntry(EngineModel):
    """Frozen snapshot of a superseded contract period."""
    model_config = ConfigDict(frozen=True)

    plan_name: str
    plan_type: str = ""
    start_date: datetime
    end_date: datetime
    amount: float = 0.0
    services_used: int = Field(default=0, ge=0)
    services_total: int = Field(default=0, ge=0)
    status: ContractStatus
    archived_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, v: Any) -> Any:
        return to_utc(v)

    @field_validator("archived_at", mode="before")
    @classmethod
    def _archived(cls, v: Any) -> Any:
        return _optional_instant(v)


class Contract(EngineModel):
    """The single current AMC or rental period for a customer↔product subject."""
    customer_ref: Optional[str] = None
    product_ref: Optional[str] = None
    kind: ContractKind = ContractKind.AMC

    plan_name: str
    plan_type: str = ""
    start_date: datetime
    end_date: datetime
    duration_months: Optional[int] = None

    amount: float = 0.0
    amount_paid: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_mode: str = "Cash"

    services_used: int = Field(default=0, ge=0)
    services_total: int = Field(default=0, ge=0)
    parts_included: bool = False
    assigned_technician: Optional[str] = None
    notes: Optional[str] = None

    history: list[HistoryEntry] = []
    version: int = 1

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, v: Any) -> Any:
        return to_utc(v)

    @field_validator("amount", "amount_paid", "services_used", "services_total", mode="before")
    @classmethod
    def _blank_counters(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return 0 if v is None else v

    @model_validator(mode="after")
    def _period_order(self) -> "Contract":
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date.date()} is before start_date {self.start_date.date()}"
            )
        return self


class ContractStatusView(EngineModel):
    status: ContractStatus
    is_expired: bool
    days_left: int
    total_days: int
    days_used: int
    time_progress_pct: float
    service_progress_pct: float


class ContractDashboard(EngineModel):
    total: int = 0
    active: int = 0
    expiring_soon: int = 0
    expired: int = 0
    revenue: float = 0.0


class RenewalInput(EngineModel):
    """Terms of the next contract period, as captured by the renew form."""
    plan_name: str
    plan_type: str = ""
    start_date: Optional[datetime] = None
    duration_months: int = Field(default_factory=lambda: get_settings().default_duration_months)
    amount: float = 0.0
    amount_paid: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_mode: str = "Cash"
    services_total: int = Field(default_factory=lambda: get_settings().default_services_total)
    parts_included: bool = False

    @field_validator("start_date", mode="before")
    @classmethod
    def _start(cls, v: Any) -> Any:
        return _optional_instant(v)

    @field_validator("amount", "amount_paid", mode="before")
    @classmethod
    def _blank_amounts(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return 0 if v is None else v


class PlanInput(RenewalInput):
    """Terms of a brand-new AMC or rental."""
    kind: ContractKind = ContractKind.AMC
    product_ref: Optional[str] = None
    assigned_technician: Optional[str] = None
    notes: Optional[str] = None


class RenewalResult(EngineModel):
    """The renewed contract and the history entry it appended, as one value."""
    contract: Contract
    history_entry: HistoryEntry
