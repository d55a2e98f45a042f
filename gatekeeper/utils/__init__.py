"""Utility helpers."""
from .paths import contained_path, file_extension  # noqa: F401
