"""
Contract Lifecycle — status and progress of an AMC / rental period.

Status is derived from (start_date, end_date, now) on every read and is never
persisted, so it cannot go stale:

    Expired       end_date < now
    ExpiringSoon  0 < days_left <= expiring_soon_days
    Active        otherwise

`now` is always passed in; this module never reads the system clock.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from amc_engine.config import get_settings
from amc_engine.engine.errors import InvalidInputError
from amc_engine.models.enums import ContractStatus
from amc_engine.models.schemas import Contract, ContractDashboard, ContractStatusView
from amc_engine.utils.dates import ceil_days, to_utc

logger = logging.getLogger(__name__)


class ContractLifecycle:
    """Pure status / progress derivation for contracts."""

    def __init__(self, expiring_soon_days: Optional[int] = None):
        if expiring_soon_days is None:
            expiring_soon_days = get_settings().expiring_soon_days
        self.expiring_soon_days = expiring_soon_days

    def status_view(self, contract: Contract, now: datetime) -> ContractStatusView:
        now = to_utc(now)
        start = to_utc(contract.start_date)
        end = to_utc(contract.end_date)

        is_expired = end < now
        days_left = ceil_days(end - now)

        if is_expired:
            status = ContractStatus.EXPIRED
        elif 0 < days_left <= self.expiring_soon_days:
            status = ContractStatus.EXPIRING_SOON
        else:
            status = ContractStatus.ACTIVE

        total_days = ceil_days(end - start)
        days_used = total_days - days_left
        if total_days > 0:
            time_progress = min(max(days_used / total_days * 100, 0.0), 100.0)
        else:
            time_progress = 0.0

        # Not clamped: usage beyond the plan shows as > 100%
        if contract.services_total > 0:
            service_progress = contract.services_used / contract.services_total * 100
        else:
            service_progress = 0.0

        return ContractStatusView(
            status=status,
            is_expired=is_expired,
            days_left=days_left,
            total_days=total_days,
            days_used=days_used,
            time_progress_pct=time_progress,
            service_progress_pct=service_progress,
        )

    def status_of(self, contract: Contract, now: datetime) -> ContractStatus:
        return self.status_view(contract, now).status

    def filter_by_status(
        self,
        contracts: Iterable[Contract],
        status: ContractStatus | str | None,
        now: datetime,
    ) -> list[Contract]:
        """
        Contracts currently in `status`; None or "All" keeps everything.
        Dashboard labels such as "Expiring Soon" are accepted.
        """
        if status is None or status == "All":
            return list(contracts)
        if isinstance(status, ContractStatus):
            wanted = status
        else:
            try:
                wanted = ContractStatus(status.replace(" ", ""))
            except ValueError:
                raise InvalidInputError("status", f"unknown status {status!r}") from None
        return [c for c in contracts if self.status_of(c, now) == wanted]

    def summarize(self, contracts: Iterable[Contract], now: datetime) -> ContractDashboard:
        """Dashboard counters: contracts per status and total contract value."""
        counts = {s: 0 for s in ContractStatus}
        total = 0
        revenue = 0.0

        for contract in contracts:
            counts[self.status_of(contract, now)] += 1
            total += 1
            revenue += contract.amount

        logger.debug(
            f"Dashboard: {total} contracts, "
            f"{counts[ContractStatus.EXPIRING_SOON]} expiring soon, "
            f"{counts[ContractStatus.EXPIRED]} expired"
        )
        return ContractDashboard(
            total=total,
            active=counts[ContractStatus.ACTIVE],
            expiring_soon=counts[ContractStatus.EXPIRING_SOON],
            expired=counts[ContractStatus.EXPIRED],
            revenue=revenue,
        )
