"""Application settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Tuple


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _list_from_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


DEFAULT_ALLOWED_REFERERS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    content_root: str = "public"
    host: str = "0.0.0.0"
    port: int = 3000
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60
    sweep_interval_seconds: int = 60
    region_blocklist: str = "blacklist.json"
    region_header: str = "cf-ipcountry"
    blocklist_timeout_seconds: int = 10
    allowed_referers: Tuple[str, ...] = DEFAULT_ALLOWED_REFERERS

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            content_root=os.getenv("GATEKEEPER_CONTENT_ROOT", "public"),
            host=os.getenv("GATEKEEPER_HOST", "0.0.0.0"),
            port=_int_from_env("GATEKEEPER_PORT", 3000),
            rate_limit_requests=_int_from_env("GATEKEEPER_RATE_LIMIT_REQUESTS", 100),
            rate_limit_window_seconds=_int_from_env(
                "GATEKEEPER_RATE_LIMIT_WINDOW_SECONDS", 15 * 60
            ),
            sweep_interval_seconds=_int_from_env("GATEKEEPER_SWEEP_INTERVAL_SECONDS", 60),
            region_blocklist=os.getenv("GATEKEEPER_REGION_BLOCKLIST", "blacklist.json"),
            region_header=os.getenv("GATEKEEPER_REGION_HEADER", "cf-ipcountry").lower(),
            blocklist_timeout_seconds=_int_from_env("GATEKEEPER_BLOCKLIST_TIMEOUT_SECONDS", 10),
            allowed_referers=_list_from_env(
                "GATEKEEPER_ALLOWED_REFERERS", DEFAULT_ALLOWED_REFERERS
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings.from_env()
