"""
Caller-side retention of quote outcomes.

The orchestrator itself keeps nothing between calls. Callers that poll for
quotes (a UI, a bot loop) use QuoteQuery: outcomes stay fresh for a short
TTL, and a new request supersedes (cancels) the query's in-flight one.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional, Tuple

from .orchestrator import QuoteOrchestrator
from .types import QuoteOutcome, QuoteRequest

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10.0


class QuoteResultCache:
    """Outcomes keyed by request, fresh for ttl_seconds after they resolve."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self._ttl_s = ttl_seconds
        self._store: Dict[Tuple[Any, ...], Tuple[QuoteOutcome, float]] = {}

    def get(self, request: QuoteRequest) -> Optional[QuoteOutcome]:
        key = request.cache_key()
        entry = self._store.get(key)
        if entry is None:
            return None
        outcome, timestamp = entry
        if (time.monotonic() - timestamp) > self._ttl_s:
            del self._store[key]
            return None
        return outcome

    def put(self, request: QuoteRequest, outcome: QuoteOutcome) -> None:
        now = time.monotonic()
        self._evict_expired(now)
        self._store[request.cache_key()] = (outcome, now)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (_, ts) in self._store.items() if (now - ts) > self._ttl_s]
        for key in expired:
            del self._store[key]

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class QuoteQuery:
    """
    One consumer's view of the current quote.

    fetch() returns a fresh cached outcome when there is one. Otherwise it
    starts an acquisition; if a different request was still in flight for
    this query, that acquisition is cancelled first.
    """

    def __init__(
        self, orchestrator: QuoteOrchestrator, cache: Optional[QuoteResultCache] = None
    ) -> None:
        self._orchestrator = orchestrator
        self._cache = cache if cache is not None else QuoteResultCache()
        self._inflight: Optional[asyncio.Task] = None
        self._inflight_key: Optional[Tuple[Any, ...]] = None

    async def fetch(self, request: QuoteRequest) -> QuoteOutcome:
        cached = self._cache.get(request)
        if cached is not None:
            return cached

        key = request.cache_key()
        task = self._inflight
        if task is None or task.done() or self._inflight_key != key:
            self.cancel()
            task = asyncio.ensure_future(self._orchestrator.acquire_quote(request))
            self._inflight = task
            self._inflight_key = key

        outcome = await asyncio.shield(task)
        self._cache.put(request, outcome)
        return outcome

    def cancel(self) -> None:
        """Abandon the in-flight acquisition, if any."""
        if self._inflight is not None and not self._inflight.done():
            logger.debug("superseding in-flight quote acquisition")
            self._inflight.cancel()
        self._inflight = None
        self._inflight_key = None
