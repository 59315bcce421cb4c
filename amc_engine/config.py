"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "AMC Entitlement & Pricing Engine"
    debug: bool = True

    # ── Contract lifecycle ───────────────────────────────
    expiring_soon_days: int = 30  # status window for "ExpiringSoon"

    # ── Plan defaults (create / renew forms) ─────────────
    default_duration_months: int = 12
    default_services_total: int = 3

    # ── API server ───────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "AMC_",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
