"""
Contract Repository — storage for current contracts and their history.
Applies renewal results as a single replacement guarded by a version check.
Uses an in-memory dict; the customer API owns the real collection.
"""

from __future__ import annotations

import logging
from copy import deepcopy

from amc_engine.models.schemas import Contract, HistoryEntry, RenewalResult

logger = logging.getLogger(__name__)


class ContractNotFoundError(KeyError):
    """No contract is stored under the given id."""


class StaleContractError(RuntimeError):
    """The stored contract changed since the caller read it."""


class ContractRepository:
    """
    Save/load contracts keyed by subject id (customer↔product).
    History lives inside the contract, so a renewal is one write.
    """

    def __init__(self):
        self._contracts: dict[str, Contract] = {}

    def add(self, contract_id: str, contract: Contract) -> Contract:
        """Store a freshly created contract. Existing ids are rejected."""
        if contract_id in self._contracts:
            raise ValueError(f"Contract {contract_id} already exists; renew it instead")
        self._contracts[contract_id] = deepcopy(contract)
        logger.info(f"Stored contract {contract_id} v{contract.version}")
        return deepcopy(contract)

    def get(self, contract_id: str) -> Contract:
        try:
            return deepcopy(self._contracts[contract_id])
        except KeyError:
            raise ContractNotFoundError(contract_id) from None

    def apply_renewal(
        self,
        contract_id: str,
        result: RenewalResult,
        expected_version: int,
    ) -> Contract:
        """
        Replace the current contract with a renewal result.

        `expected_version` is the version the renewal was computed from.
        If another writer got there first the stored contract is left
        untouched and StaleContractError is raised.
        """
        stored = self._contracts.get(contract_id)
        if stored is None:
            raise ContractNotFoundError(contract_id)
        if stored.version != expected_version:
            raise StaleContractError(
                f"Contract {contract_id} is at v{stored.version}, "
                f"renewal was computed from v{expected_version}"
            )

        new = result.contract
        if (
            len(new.history) != len(stored.history) + 1
            or new.history[:-1] != stored.history
            or new.history[-1] != result.history_entry
        ):
            raise ValueError(
                f"Renewal result for {contract_id} does not extend the stored history"
            )
        if (new.customer_ref, new.product_ref) != (stored.customer_ref, stored.product_ref):
            raise ValueError(
                f"Renewal result for {contract_id} belongs to "
                f"{new.customer_ref}:{new.product_ref}"
            )
        if new.version != stored.version + 1:
            raise ValueError(
                f"Renewal result for {contract_id} is v{new.version}, "
                f"expected v{stored.version + 1}"
            )

        self._contracts[contract_id] = deepcopy(new)
        logger.info(
            f"Applied renewal to {contract_id}: v{stored.version} → v{new.version}, "
            f"history={len(new.history)}"
        )
        return deepcopy(new)

    def history(self, contract_id: str) -> list[HistoryEntry]:
        return list(self.get(contract_id).history)

    def list_contracts(self) -> list[str]:
        """List all stored contract ids."""
        return list(self._contracts.keys())
