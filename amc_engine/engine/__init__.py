"""
Engine — pricing and contract-lifecycle computations.

Callers import ONLY from this package:
    from amc_engine.engine import EntitlementEngine
"""

from .entitlement_engine import EntitlementEngine
from .errors import InvalidInputError
from .pricing import compute_item_price

__all__ = ["EntitlementEngine", "InvalidInputError", "compute_item_price"]
