"""Static region block list loaded once at startup."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from gatekeeper.clients import BlocklistClient, BlocklistError

LOGGER = logging.getLogger(__name__)


class RegionTableError(RuntimeError):
    """Raised when the region block list cannot be read or parsed."""


@dataclass(frozen=True)
class RegionEntry:
    code: str
    blocked: bool
    name: str


class RegionTable:
    """Immutable lookup of region entries keyed by upper-cased region code."""

    def __init__(self, entries: Iterable[RegionEntry]) -> None:
        self._entries: Dict[str, RegionEntry] = {entry.code.upper(): entry for entry in entries}

    def lookup(self, code: str) -> Optional[RegionEntry]:
        return self._entries.get(code.strip().upper())

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_records(cls, records: Any) -> "RegionTable":
        """Build a table from the decoded JSON list of region records."""

        if not isinstance(records, list):
            raise RegionTableError("Region block list must be a JSON array.")
        entries = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise RegionTableError(f"Region record #{index} is not an object.")
            code = record.get("regionCode")
            if not isinstance(code, str) or not code.strip():
                raise RegionTableError(f"Region record #{index} has no regionCode.")
            flag = str(record.get("regionBlocked") or "").strip().upper()
            name = record.get("CountryName") or code
            entries.append(RegionEntry(code=code.strip(), blocked=flag == "Y", name=str(name)))
        return cls(entries)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_region_table(
    source: str, *, client: BlocklistClient | None = None, timeout_seconds: float = 10
) -> RegionTable:
    """Load the block list from a local JSON file or an ``http(s)`` URL."""

    if _is_url(source):
        client = client or BlocklistClient(timeout_seconds=timeout_seconds)
        try:
            records = client.fetch(source)
        except BlocklistError as exc:
            raise RegionTableError(str(exc)) from exc
    else:
        try:
            records = json.loads(Path(source).read_text(encoding="utf-8"))
        except OSError as exc:
            raise RegionTableError(f"Unable to read region block list {source}: {exc}") from exc
        except ValueError as exc:
            raise RegionTableError(f"Region block list {source} is not valid JSON: {exc}") from exc

    table = RegionTable.from_records(records)
    LOGGER.info("loaded %d region entries from %s", len(table), source)
    return table
