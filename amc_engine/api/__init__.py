"""
FastAPI application factory and API package.

Run with:
    uvicorn amc_engine.api:app --reload --port 8000

Or via main.py:
    python -m amc_engine.main --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from amc_engine.config import get_settings
from amc_engine.api.routes import health_router, pricing_router, contracts_router
from amc_engine.engine import InvalidInputError

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="AMC Entitlement & Pricing API",
        description="Pricing, order totals and AMC / rental contract lifecycle",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: the admin console runs on its own origin
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(pricing_router, prefix="/api", tags=["Pricing"])
    application.include_router(contracts_router, prefix="/api/contracts", tags=["Contracts"])

    @application.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(
            status_code=422,
            content={"field": exc.field, "detail": exc.detail},
        )

    logger.debug(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn amc_engine.api:app`
app = create_app()
