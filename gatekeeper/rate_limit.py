"""In-memory per-client rate limiter with a periodic expiry sweep."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class ClientWindow:
    request_count: int
    window_start: float


class RateLimiter:
    """Counts requests per client inside a fixed-duration window.

    A client's window opens on its first request and admits ``limit`` requests.
    Once ``window_seconds`` have passed since it opened, the next request
    replaces it with a fresh window instead of incrementing it.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Clock = time.monotonic) -> None:
        self.limit = limit
        self.window = window_seconds
        self._clock = clock
        self._windows: Dict[str, ClientWindow] = {}
        self._lock = Lock()

    def check_and_record(self, client_id: str) -> bool:
        """Record a request from ``client_id`` and return whether it is allowed."""

        with self._lock:
            now = self._clock()
            current = self._windows.get(client_id)
            if current is None or now - current.window_start >= self.window:
                self._windows[client_id] = ClientWindow(request_count=1, window_start=now)
                return True
            if current.request_count >= self.limit:
                return False
            current.request_count += 1
            return True

    def sweep(self) -> int:
        """Drop windows older than the window duration; return how many were removed."""

        with self._lock:
            now = self._clock()
            expired = [
                client_id
                for client_id, entry in self._windows.items()
                if now - entry.window_start > self.window
            ]
            for client_id in expired:
                del self._windows[client_id]
        return len(expired)

    def get(self, client_id: str) -> Optional[ClientWindow]:
        """Return a snapshot of the window held for ``client_id``, if any."""

        with self._lock:
            entry = self._windows.get(client_id)
            if entry is None:
                return None
            return ClientWindow(entry.request_count, entry.window_start)

    def __len__(self) -> int:
        """Number of clients with a live window."""

        with self._lock:
            return len(self._windows)


class RateLimitSweeper:
    """Runs ``RateLimiter.sweep`` on a fixed interval inside the event loop."""

    def __init__(self, limiter: RateLimiter, interval_seconds: float) -> None:
        self.limiter = limiter
        self.interval = interval_seconds
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        self.running = True
        self._task = asyncio.create_task(self._sweep_loop())
        LOGGER.info("rate limit sweeper started")

    async def stop(self) -> None:
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        LOGGER.info("rate limit sweeper stopped")

    async def _sweep_loop(self) -> None:
        while self.running:
            await asyncio.sleep(self.interval)
            try:
                removed = self.limiter.sweep()
            except Exception:  # noqa: BLE001
                LOGGER.exception("rate limit sweep failed")
                continue
            if removed:
                LOGGER.debug("swept %d expired client windows", removed)
