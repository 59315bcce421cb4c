"""
Renewal Processor — creates contracts and moves them to a new period.

A renewal is a single transition. The result carries both the new current
contract (with the archived period already appended to its history) and the
appended history entry, so storage applies them together or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from amc_engine.engine.errors import InvalidInputError
from amc_engine.engine.lifecycle import ContractLifecycle
from amc_engine.models.schemas import (
    Contract,
    HistoryEntry,
    PlanInput,
    RenewalInput,
    RenewalResult,
)
from amc_engine.utils.dates import add_months, to_utc

logger = logging.getLogger(__name__)


def _validate_terms(terms: RenewalInput) -> None:
    if terms.duration_months <= 0:
        raise InvalidInputError("duration_months", f"must be > 0, got {terms.duration_months}")
    if terms.services_total < 0:
        raise InvalidInputError("services_total", f"must be >= 0, got {terms.services_total}")
    if terms.amount < 0:
        raise InvalidInputError("amount", f"must be >= 0, got {terms.amount}")
    if terms.amount_paid < 0:
        raise InvalidInputError("amount_paid", f"must be >= 0, got {terms.amount_paid}")


def _period(terms: RenewalInput, now: datetime) -> tuple[datetime, datetime]:
    start = to_utc(terms.start_date) if terms.start_date is not None else to_utc(now)
    return start, add_months(start, terms.duration_months)


class RenewalProcessor:
    """Builds fresh contracts and renewal transitions. Never mutates its inputs."""

    def __init__(self, lifecycle: Optional[ContractLifecycle] = None):
        self.lifecycle = lifecycle or ContractLifecycle()

    def create_contract(
        self,
        customer_ref: Optional[str],
        plan: PlanInput,
        now: datetime,
    ) -> Contract:
        """A first AMC / rental for a customer: no history, no services used."""
        if not customer_ref or not str(customer_ref).strip():
            raise InvalidInputError("customer_ref", "a customer reference is required")
        _validate_terms(plan)

        start, end = _period(plan, now)
        contract = Contract(
            customer_ref=str(customer_ref),
            product_ref=plan.product_ref,
            kind=plan.kind,
            plan_name=plan.plan_name,
            plan_type=plan.plan_type,
            start_date=start,
            end_date=end,
            duration_months=plan.duration_months,
            amount=plan.amount,
            amount_paid=plan.amount_paid,
            payment_status=plan.payment_status,
            payment_mode=plan.payment_mode,
            services_used=0,
            services_total=plan.services_total,
            parts_included=plan.parts_included,
            assigned_technician=plan.assigned_technician,
            notes=plan.notes,
            history=[],
            version=1,
        )
        logger.info(
            f"Created {plan.kind.value} contract for {customer_ref}: "
            f"{plan.plan_name} {start.date()} → {end.date()}"
        )
        return contract

    def archive(self, contract: Contract, now: datetime) -> HistoryEntry:
        """Snapshot of the contract's current period with its status at `now`."""
        return HistoryEntry(
            plan_name=contract.plan_name,
            plan_type=contract.plan_type,
            start_date=contract.start_date,
            end_date=contract.end_date,
            amount=contract.amount,
            services_used=contract.services_used,
            services_total=contract.services_total,
            status=self.lifecycle.status_of(contract, now),
            archived_at=to_utc(now),
        )

    def renew(
        self,
        current: Optional[Contract],
        renewal: RenewalInput,
        now: datetime,
    ) -> RenewalResult:
        """
        Archive the current period and start the next one.

        Returns the new contract (history = old history + one entry,
        services_used reset, version bumped) together with that entry.
        Raises InvalidInputError before building anything if the contract
        is missing or the renewal terms are out of range.
        """
        if current is None:
            raise InvalidInputError("contract", "no current contract to renew")
        _validate_terms(renewal)

        entry = self.archive(current, now)
        start, end = _period(renewal, now)

        contract = Contract(
            customer_ref=current.customer_ref,
            product_ref=current.product_ref,
            kind=current.kind,
            plan_name=renewal.plan_name,
            plan_type=renewal.plan_type,
            start_date=start,
            end_date=end,
            duration_months=renewal.duration_months,
            amount=renewal.amount,
            amount_paid=renewal.amount_paid,
            payment_status=renewal.payment_status,
            payment_mode=renewal.payment_mode,
            services_used=0,
            services_total=renewal.services_total,
            parts_included=renewal.parts_included,
            assigned_technician=current.assigned_technician,
            notes=current.notes,
            history=[*current.history, entry],
            version=current.version + 1,
        )

        logger.info(
            f"Renewed contract for {current.customer_ref}: "
            f"{entry.plan_name} ({entry.status.value}) → {renewal.plan_name} "
            f"{start.date()} → {end.date()}, history={len(contract.history)}"
        )
        return RenewalResult(contract=contract, history_entry=entry)
