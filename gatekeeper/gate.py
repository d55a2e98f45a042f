"""Ordered request checks evaluated before any content is served."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from gatekeeper.rate_limit import RateLimiter
from gatekeeper.regions import RegionTable

LOGGER = logging.getLogger(__name__)

KNOWN_BROWSERS = (
    "Chrome",
    "Firefox",
    "Safari",
    "Edg",  # Microsoft Edge
    "Opera",
    "SamsungBrowser",
    "CriOS",  # Chrome on iOS
    "FxiOS",  # Firefox on iOS
)


@dataclass(frozen=True)
class GateRequest:
    """The parts of an inbound request the checks look at."""

    client_ip: str
    path: str
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    region_code: Optional[str] = None


@dataclass(frozen=True)
class GateOutcome:
    allowed: bool
    status: int = 200
    message: str = ""
    check: str = ""

    @classmethod
    def passed(cls) -> "GateOutcome":
        return cls(allowed=True)

    @classmethod
    def rejected(cls, status: int, message: str, check: str) -> "GateOutcome":
        return cls(allowed=False, status=status, message=message, check=check)


class Check(Protocol):
    name: str

    def __call__(self, request: GateRequest) -> GateOutcome:
        ...


def is_human_user(user_agent: Optional[str]) -> bool:
    """Return ``True`` when the agent string names a known browser."""

    if not user_agent:
        return False
    return any(browser in user_agent for browser in KNOWN_BROWSERS)


class RegionBlockCheck:
    """Rejects requests whose upstream-supplied region code is blocked.

    Requests without a region code pass. A code missing from the table is
    treated as not blocked. With no table loaded the check passes everything.
    """

    name = "region"

    def __init__(self, table: Optional[RegionTable]) -> None:
        self.table = table

    def __call__(self, request: GateRequest) -> GateOutcome:
        if not request.region_code or self.table is None:
            return GateOutcome.passed()
        entry = self.table.lookup(request.region_code)
        if entry is None:
            LOGGER.warning(
                "unknown region code, allowing request",
                extra={"region": request.region_code, "client_ip": request.client_ip},
            )
            return GateOutcome.passed()
        if entry.blocked:
            return GateOutcome.rejected(
                403,
                f"403 Forbidden - Due to regional policies, access is restricted from {entry.name}.",
                self.name,
            )
        return GateOutcome.passed()


class HumanUserCheck:
    name = "user_agent"

    def __call__(self, request: GateRequest) -> GateOutcome:
        if is_human_user(request.user_agent):
            return GateOutcome.passed()
        return GateOutcome.rejected(403, "403 Forbidden - Inorganic traffic blocked", self.name)


class RateLimitCheck:
    name = "rate_limit"

    def __init__(self, limiter: RateLimiter) -> None:
        self.limiter = limiter

    def __call__(self, request: GateRequest) -> GateOutcome:
        if self.limiter.check_and_record(request.client_ip):
            return GateOutcome.passed()
        return GateOutcome.rejected(
            429,
            "429 Too Many Requests - Rate limit exceeded. Please try again later.",
            self.name,
        )


class AccessGate:
    """Runs checks in order and stops at the first rejection."""

    def __init__(self, checks: Sequence[Check]) -> None:
        self.checks = tuple(checks)

    @classmethod
    def default(cls, limiter: RateLimiter, regions: Optional[RegionTable]) -> "AccessGate":
        return cls([RegionBlockCheck(regions), HumanUserCheck(), RateLimitCheck(limiter)])

    def evaluate(self, request: GateRequest) -> GateOutcome:
        for check in self.checks:
            outcome = check(request)
            if not outcome.allowed:
                LOGGER.info(
                    "request rejected",
                    extra={
                        "client_ip": request.client_ip,
                        "path": request.path,
                        "check": outcome.check,
                        "status": outcome.status,
                        "region": request.region_code,
                    },
                )
                return outcome
        return GateOutcome.passed()
