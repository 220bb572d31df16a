"""Caller-side retention: TTL cache and superseding quote queries."""

from __future__ import annotations

import asyncio
import time

import pytest

from swap_quoter.routing.analytics import RecordingAnalyticsSink
from swap_quoter.routing.cache import QuoteQuery, QuoteResultCache
from swap_quoter.routing.orchestrator import QuoteOrchestrator
from swap_quoter.routing.types import QuoteNotFound, QuoteState
from tests.fakes.quoting import CLASSIC_RESPONSE, FakeLocalEngine, FakeRemoteClient, make_request


def _orchestrator(remote):
    return QuoteOrchestrator(remote, FakeLocalEngine(), analytics=RecordingAnalyticsSink())


class TestQuoteResultCache:
    def test_put_and_get(self):
        cache = QuoteResultCache(ttl_seconds=10.0)
        outcome = QuoteNotFound(latency_ms=1.0)
        cache.put(make_request(), outcome)
        assert cache.get(make_request()) is outcome
        assert len(cache) == 1

    def test_key_ignores_address_case(self):
        cache = QuoteResultCache()
        request = make_request()
        cache.put(request, QuoteNotFound())
        lowered = make_request(account=request.account.lower())
        assert cache.get(lowered) is not None

    def test_different_amount_misses(self):
        cache = QuoteResultCache()
        cache.put(make_request(amount="1"), QuoteNotFound())
        assert cache.get(make_request(amount="2")) is None

    def test_expired_entry_is_dropped(self):
        cache = QuoteResultCache(ttl_seconds=0.0)
        cache.put(make_request(), QuoteNotFound())
        time.sleep(0.01)
        assert cache.get(make_request()) is None
        assert len(cache) == 0

    def test_put_evicts_expired_entries_for_other_requests(self):
        cache = QuoteResultCache(ttl_seconds=0.0)
        for amount in range(1, 101):
            cache.put(make_request(amount=str(amount)), QuoteNotFound())
        time.sleep(0.01)
        cache.put(make_request(amount="1000"), QuoteNotFound())
        assert len(cache) == 1

    def test_put_keeps_fresh_entries(self):
        cache = QuoteResultCache(ttl_seconds=60.0)
        cache.put(make_request(amount="1"), QuoteNotFound())
        cache.put(make_request(amount="2"), QuoteNotFound())
        assert len(cache) == 2


class TestQuoteQuery:
    def test_fresh_result_served_from_cache(self):
        remote = FakeRemoteClient(CLASSIC_RESPONSE)
        query = QuoteQuery(_orchestrator(remote))

        async def run():
            first = await query.fetch(make_request())
            second = await query.fetch(make_request())
            return first, second

        first, second = asyncio.run(run())
        assert first is second
        assert remote.call_count == 1
        assert first.state is QuoteState.SUCCESS

    def test_superseding_request_cancels_inflight(self):
        remote = FakeRemoteClient(CLASSIC_RESPONSE, delay_s=0.2)
        query = QuoteQuery(_orchestrator(remote))

        async def run():
            stale = asyncio.ensure_future(query.fetch(make_request(amount="1")))
            await asyncio.sleep(0.01)
            fresh = await query.fetch(make_request(amount="2"))
            with pytest.raises(asyncio.CancelledError):
                await stale
            return fresh

        fresh = asyncio.run(run())
        assert fresh.state is QuoteState.SUCCESS
        assert remote.cancelled is True
        assert remote.call_count == 2

    def test_same_request_joins_inflight(self):
        remote = FakeRemoteClient(CLASSIC_RESPONSE, delay_s=0.05)
        query = QuoteQuery(_orchestrator(remote))

        async def run():
            return await asyncio.gather(query.fetch(make_request()), query.fetch(make_request()))

        first, second = asyncio.run(run())
        assert remote.call_count == 1
        assert first is second
