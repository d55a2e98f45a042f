"""Path containment helpers."""
from __future__ import annotations

import os


def contained_path(root: str, request_path: str) -> str | None:
    """Join ``request_path`` onto ``root`` and return it if it stays inside ``root``.

    The check is purely lexical: nothing on disk is touched. ``None`` means the
    normalised path escapes the root or is otherwise unusable.
    """

    if "\x00" in request_path:
        return None
    root = os.path.abspath(root)
    relative = request_path.replace("\\", "/").lstrip("/")
    candidate = os.path.normpath(os.path.join(root, relative))
    if os.path.commonpath([root, candidate]) != root:
        return None
    return candidate


def file_extension(path: str) -> str:
    """Return the lower-cased extension of ``path`` including the dot."""

    return os.path.splitext(path)[1].lower()
