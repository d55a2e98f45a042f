from __future__ import annotations

import pytest

from gatekeeper.gate import (
    AccessGate,
    GateOutcome,
    GateRequest,
    HumanUserCheck,
    RegionBlockCheck,
    is_human_user,
)
from gatekeeper.rate_limit import RateLimiter
from gatekeeper.regions import RegionEntry, RegionTable

from helpers import CHROME_UA, FakeClock

REGIONS = RegionTable(
    [
        RegionEntry(code="RU", blocked=True, name="Russia"),
        RegionEntry(code="US", blocked=False, name="United States"),
    ]
)


def make_gate(limit: int = 100, regions: RegionTable | None = REGIONS):
    limiter = RateLimiter(limit, 900, clock=FakeClock())
    return AccessGate.default(limiter, regions), limiter


def make_request(**overrides) -> GateRequest:
    values = {"client_ip": "10.0.0.1", "path": "/", "user_agent": CHROME_UA}
    values.update(overrides)
    return GateRequest(**values)


@pytest.mark.parametrize(
    "agent",
    [
        CHROME_UA,
        "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0",
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) CriOS/126.0 Mobile",
        "Mozilla/5.0 (Linux; Android 14) SamsungBrowser/25.0",
    ],
)
def test_known_browsers_are_human(agent):
    assert is_human_user(agent)


@pytest.mark.parametrize("agent", [None, "", "curl/8.5.0", "python-requests/2.32", "Googlebot/2.1"])
def test_unknown_or_missing_agents_are_not_human(agent):
    assert not is_human_user(agent)


def test_request_passing_all_checks_is_allowed():
    gate, limiter = make_gate()

    outcome = gate.evaluate(make_request(region_code="US"))

    assert outcome == GateOutcome.passed()
    assert limiter.get("10.0.0.1").request_count == 1


def test_missing_user_agent_is_forbidden():
    gate, _ = make_gate()

    outcome = gate.evaluate(make_request(user_agent=None))

    assert not outcome.allowed
    assert outcome.status == 403
    assert outcome.check == "user_agent"
    assert "Inorganic traffic" in outcome.message


def test_blocked_region_names_the_region_and_short_circuits():
    gate, limiter = make_gate()

    outcome = gate.evaluate(make_request(region_code="RU", user_agent=None))

    assert outcome.status == 403
    assert outcome.check == "region"
    assert "Russia" in outcome.message
    assert len(limiter) == 0


def test_unknown_region_code_is_allowed():
    gate, _ = make_gate()

    assert gate.evaluate(make_request(region_code="ZZ")).allowed


def test_region_check_without_table_passes_everything():
    check = RegionBlockCheck(None)

    assert check(make_request(region_code="RU")).allowed


def test_rejected_agent_does_not_consume_rate_limit():
    gate, limiter = make_gate()

    gate.evaluate(make_request(user_agent="curl/8.5.0"))

    assert limiter.get("10.0.0.1") is None


def test_rate_limit_rejection_after_limit():
    gate, _ = make_gate(limit=100)
    request = make_request()

    outcomes = [gate.evaluate(request) for _ in range(101)]

    assert all(outcome.allowed for outcome in outcomes[:100])
    assert outcomes[100].status == 429
    assert outcomes[100].check == "rate_limit"


def test_checks_run_in_order_until_first_failure():
    calls = []

    def check(name, allowed):
        def run(request):
            calls.append(name)
            if allowed:
                return GateOutcome.passed()
            return GateOutcome.rejected(418, name, name)

        return run

    gate = AccessGate([check("one", True), check("two", False), check("three", True)])

    outcome = gate.evaluate(make_request())

    assert calls == ["one", "two"]
    assert outcome.status == 418


def test_human_user_check_passes_browser():
    assert HumanUserCheck()(make_request()).allowed
