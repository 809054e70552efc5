"""SubmissionCache: short-lived, in-memory store of pushed payloads.

Interaction buttons carry a submission ID; when a user taps one (possibly
minutes later) the handler looks the original payload up here. Entries
expire a fixed time after creation regardless of reads. Nothing survives
a restart.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playlist_bridge.models import Payload

logger = logging.getLogger(__name__)

DEFAULT_TTL = 30 * 60.0  # seconds
DEFAULT_SWEEP_INTERVAL = 60.0  # seconds


@dataclass(frozen=True)
class CacheEntry:
    submission_id: str
    payload: Payload
    created_at: float

    def expired(self, now: float, ttl: float) -> bool:
        return now - self.created_at >= ttl


def generate_submission_id() -> str:
    """Millisecond timestamp plus random hex, e.g. ``lq3x9k2a4f1c9e07``."""
    millis = int(time.time() * 1000)
    return f"{_base36(millis)}{uuid.uuid4().hex[:8]}"


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = digits[r] + out
    return out or "0"


class SubmissionCache:
    """Thread-safe TTL map from submission ID to payload.

    Pass a short *ttl* and a fake *clock* for tests. ``start()`` runs a
    background sweep on the current event loop; without it expired
    entries are still hidden from ``get()`` and dropped lazily.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        *,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = generate_submission_id,
    ) -> None:
        if ttl <= 0:
            msg = f"ttl must be positive, got {ttl}"
            raise ValueError(msg)
        self.ttl = ttl
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._id_factory = id_factory
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for e in self._entries.values() if not e.expired(now, self.ttl))

    def put(self, payload: Payload) -> str:
        """Store *payload* and return its new submission ID."""
        with self._lock:
            now = self._clock()
            submission_id = self._id_factory()
            while submission_id in self._entries:
                submission_id = self._id_factory()
            self._entries[submission_id] = CacheEntry(submission_id, payload, now)
        logger.debug("Cached submission %s (ttl=%ss)", submission_id, self.ttl)
        return submission_id

    def get(self, submission_id: str) -> Payload | None:
        """Return the cached payload, or None if unknown or expired."""
        with self._lock:
            entry = self._entries.get(submission_id)
            if entry is None:
                return None
            if entry.expired(self._clock(), self.ttl):
                del self._entries[submission_id]
                return None
            return entry.payload

    def evict_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if e.expired(now, self.ttl)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.info("Evicted %d expired submission(s)", len(stale))
        return len(stale)

    # -- Background sweep ------------------------------------------------------

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                self.evict_expired()
            except Exception:
                logger.exception("Submission cache sweep failed")

    def start(self) -> None:
        """Start the periodic eviction task on the running loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())
            logger.info(
                "Submission cache sweeper started (ttl=%ss, interval=%ss)",
                self.ttl,
                self._sweep_interval,
            )

    async def stop(self) -> None:
        """Cancel the eviction task."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None
