"""Turns gate outcomes and content resolutions into HTTP responses."""
from __future__ import annotations

from fastapi.responses import FileResponse, PlainTextResponse, Response

from gatekeeper.content import Resolution
from gatekeeper.gate import GateOutcome


def reject(outcome: GateOutcome) -> Response:
    """Build the response for a request stopped by the access gate."""

    return PlainTextResponse(outcome.message, status_code=outcome.status)


def render(resolution: Resolution) -> Response:
    """Build the response for a resolved route or asset."""

    if not resolution.ok:
        return PlainTextResponse(resolution.body, status_code=resolution.status)
    if resolution.file_path is not None:
        return FileResponse(resolution.file_path, media_type=resolution.content_type)
    return Response(
        content=resolution.body,
        status_code=resolution.status,
        media_type=resolution.content_type,
        headers=resolution.headers,
    )
