"""Access-gated static content serving: checks, rate limiting and content resolution."""

from .config import Settings, get_settings
from .content import ContentResolver
from .dispatch import reject, render
from .gate import AccessGate, GateRequest
from .logging_config import configure_logging
from .rate_limit import RateLimiter, RateLimitSweeper
from .regions import RegionTable, RegionTableError, load_region_table

__all__ = [
    "AccessGate",
    "ContentResolver",
    "GateRequest",
    "RateLimiter",
    "RateLimitSweeper",
    "RegionTable",
    "RegionTableError",
    "Settings",
    "configure_logging",
    "get_settings",
    "load_region_table",
    "reject",
    "render",
]
