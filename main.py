"""FastAPI application that serves static content behind an access gate."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from gatekeeper import (
    AccessGate,
    ContentResolver,
    GateRequest,
    RateLimiter,
    RateLimitSweeper,
    RegionTable,
    RegionTableError,
    Settings,
    configure_logging,
    get_settings,
    load_region_table,
    reject,
    render,
)

configure_logging()
LOGGER = logging.getLogger(__name__)

# Every method gets the same gate and content handling.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _load_regions(settings: Settings) -> Optional[RegionTable]:
    if not settings.region_blocklist:
        LOGGER.info("no region block list configured, region blocking disabled")
        return None
    try:
        return load_region_table(
            settings.region_blocklist, timeout_seconds=settings.blocklist_timeout_seconds
        )
    except RegionTableError as exc:
        LOGGER.error("region block list unavailable, region blocking disabled: %s", exc)
        return None


def create_app(
    settings: Optional[Settings] = None,
    *,
    limiter: Optional[RateLimiter] = None,
    regions: Optional[RegionTable] = None,
) -> FastAPI:
    """Build the application with its own limiter, region table and resolver."""

    settings = settings or get_settings()
    limiter = limiter or RateLimiter(
        settings.rate_limit_requests, settings.rate_limit_window_seconds
    )
    if regions is None:
        regions = _load_regions(settings)
    gate = AccessGate.default(limiter, regions)
    resolver = ContentResolver(settings.content_root, settings.allowed_referers)
    sweeper = RateLimitSweeper(limiter, settings.sweep_interval_seconds)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()

    app = FastAPI(
        title="Gated static content server",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.limiter = limiter
    app.state.gate = gate
    app.state.resolver = resolver

    @app.middleware("http")
    async def apply_access_gate(request: Request, call_next):  # type: ignore[override]
        client_ip = request.client.host if request.client else "unknown"
        gate_request = GateRequest(
            client_ip=client_ip,
            path=request.url.path,
            user_agent=request.headers.get("user-agent"),
            referer=request.headers.get("referer"),
            region_code=request.headers.get(settings.region_header),
        )
        outcome = gate.evaluate(gate_request)
        if not outcome.allowed:
            return reject(outcome)
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Unhandled exception", extra={"client_ip": client_ip})
            raise exc
        return response

    @app.api_route("/{full_path:path}", methods=ALL_METHODS)
    def serve_content(request: Request, full_path: str) -> Response:
        """Serve a named HTML route or a static asset from the content root."""

        resolution = resolver.resolve("/" + full_path, request.headers.get("referer"))
        return render(resolution)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
