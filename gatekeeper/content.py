"""Maps request paths to HTML routes or static assets under the content root."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence

from gatekeeper.utils import contained_path, file_extension

LOGGER = logging.getLogger(__name__)

ROUTES: Mapping[str, str] = {
    "/": "home.html",
    "/about": "about.html",
    "/contact": "contact.html",
}

MIME_TYPES: Mapping[str, str] = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".webp": "image/webp",
    ".webm": "video/webm",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

NO_CACHE_HEADERS: Mapping[str, str] = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


@dataclass(frozen=True)
class Resolution:
    status: int
    body: str
    content_type: str = "text/plain"
    headers: Dict[str, str] = field(default_factory=dict)
    file_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 200


def content_type_for(path: str) -> str:
    return MIME_TYPES.get(file_extension(path), DEFAULT_CONTENT_TYPE)


def is_hotlinking(referer: Optional[str], allowed_referers: Sequence[str]) -> bool:
    """Return ``True`` when a referer is present and matches no allowed origin."""

    if not referer:
        return False
    return not any(referer.startswith(allowed) for allowed in allowed_referers)


class ContentResolver:
    """Resolves a request path to a route page or a static asset."""

    def __init__(
        self,
        root: str,
        allowed_referers: Sequence[str],
        routes: Mapping[str, str] = ROUTES,
    ) -> None:
        self.root = os.path.abspath(root)
        self.allowed_referers = tuple(allowed_referers)
        self.routes = dict(routes)

    def resolve(self, path: str, referer: Optional[str] = None) -> Resolution:
        filename = self.routes.get(path)
        if filename is not None:
            return self._serve_route(path, filename)
        return self._serve_asset(path, referer)

    def _serve_route(self, path: str, filename: str) -> Resolution:
        file_path = os.path.join(self.root, filename)
        try:
            with open(file_path, encoding="utf-8") as handle:
                html = handle.read()
        except (OSError, UnicodeDecodeError):
            LOGGER.exception("failed to read route file", extra={"path": path})
            return Resolution(500, "Internal Server Error")
        return Resolution(200, html, content_type="text/html", headers=dict(NO_CACHE_HEADERS))

    def _serve_asset(self, path: str, referer: Optional[str]) -> Resolution:
        safe_path = contained_path(self.root, path)
        if safe_path is None:
            LOGGER.info("path traversal attempt blocked", extra={"path": path, "status": 403})
            return Resolution(403, "Access denied")

        if not os.path.isfile(safe_path):
            LOGGER.debug("asset not found", extra={"path": path, "status": 404})
            return Resolution(404, "404 Not Found")

        if is_hotlinking(referer, self.allowed_referers):
            LOGGER.info("hotlinking blocked", extra={"path": path, "status": 403})
            return Resolution(403, "403 Forbidden - Hotlinking not allowed")

        return Resolution(200, "", content_type=content_type_for(safe_path), file_path=safe_path)
