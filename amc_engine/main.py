"""
AMC Entitlement & Pricing Engine — Main Entry Point

Print a worked example (CLI):
    python -m amc_engine.main

Run as an API server (for the admin console):
    python -m amc_engine.main --serve
    # or: uvicorn amc_engine.api:app --reload --port 8000

Or import and use programmatically:
    from amc_engine.engine import EntitlementEngine
    breakdown = EntitlementEngine().quote_product(product, offers)
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from amc_engine.config import get_settings
from amc_engine.engine import EntitlementEngine
from amc_engine.models.schemas import Contract, PercentageOffer, Product, RenewalInput
from amc_engine.utils.logger import setup_logging


def run(now: datetime | None = None) -> dict:
    """Price a sample product and renew a sample AMC; return both results."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    now = now or datetime.now(timezone.utc)

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()}")
    logger.info(f"  Started: {now.isoformat()}")
    logger.info("=" * 60)

    engine = EntitlementEngine()

    offer = PercentageOffer(
        id="MONSOON5", title="Monsoon 5%", discount_value=5,
        min_order_amount=5000, max_discount_amount=300, is_active=True,
    )
    product = Product(id="RO-100", name="RO Purifier", base_price=10000,
                      discount_percent=10, offer_id=offer.id)
    breakdown = engine.quote_product(product, {offer.id: offer})

    contract = Contract(
        customer_ref="CUST-001", plan_name="Gold Plan", plan_type="Gold",
        start_date="2024-01-01", end_date="2025-01-01", amount=2999,
        services_used=2, services_total=3,
    )
    view = engine.contract_status(contract, now)
    renewal = engine.renew_contract(
        contract,
        RenewalInput(plan_name="Gold Plan", plan_type="Gold", amount=3199),
        now,
    )

    result = {
        "breakdown": breakdown.model_dump(by_alias=True, mode="json"),
        "status": view.model_dump(by_alias=True, mode="json"),
        "renewal": renewal.model_dump(by_alias=True, mode="json"),
    }
    _print_summary(result)
    return result


def _print_summary(result: dict) -> None:
    """Print a human-readable summary of the sample run."""
    logger = logging.getLogger(__name__)

    breakdown = result.get("breakdown", {})
    status = result.get("status", {})
    renewed = result.get("renewal", {}).get("contract", {})

    logger.info("")
    logger.info("-" * 60)
    logger.info("  SAMPLE RESULT SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Base Price:     ₹{breakdown.get('basePrice', 0):,.2f}")
    logger.info(f"  Item Discount:  ₹{breakdown.get('productDiscountAmount', 0):,.2f}")
    logger.info(f"  Offer Discount: ₹{breakdown.get('offerDiscountAmount', 0):,.2f}")
    logger.info(f"  Final Price:    ₹{breakdown.get('finalPrice', 0):,.2f}")
    logger.info(f"  AMC Status:     {status.get('status', 'N/A')} ({status.get('daysLeft', '?')} days)")
    logger.info(f"  Renewed Until:  {renewed.get('endDate', 'N/A')}")
    logger.info(f"  History:        {len(renewed.get('history', []))} entries")
    logger.info("-" * 60)


def serve(host: str | None = None, port: int | None = None) -> None:
    """Start the FastAPI server (for the admin console)."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    host = host or settings.api_host
    port = port or settings.api_port
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("amc_engine.api:app", host=host, port=port, reload=settings.debug)


def main(argv: list[str] | None = None) -> None:
    """Console entry point: `--serve` starts the API, otherwise print the sample run."""
    argv = sys.argv[1:] if argv is None else argv
    if "--serve" in argv:
        serve()
    else:
        run()


if __name__ == "__main__":
    main()
