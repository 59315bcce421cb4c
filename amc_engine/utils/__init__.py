from .logger import setup_logging
from .dates import add_months, ceil_days, to_utc

__all__ = ["setup_logging", "add_months", "ceil_days", "to_utc"]
