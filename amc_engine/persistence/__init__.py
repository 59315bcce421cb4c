"""Persistence — ContractRepository."""

from amc_engine.persistence.contract_repository import (
    ContractNotFoundError,
    ContractRepository,
    StaleContractError,
)

__all__ = ["ContractRepository", "ContractNotFoundError", "StaleContractError"]
