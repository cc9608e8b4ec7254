"""Tests for the search analytics tracker."""

import json

import httpx
import pytest

from typeahead.application.search_analytics import DAY_MS, SearchAnalyticsService
from typeahead.infrastructure.adapters.memory_store_adapter import MemoryKeyValueStore


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLocalAnalytics:
    """Local log, popular queries and trends."""

    def setup_method(self):
        self.store = MemoryKeyValueStore()
        self.clock = FakeClock()
        self.service = SearchAnalyticsService(self.store, max_local_events=5, clock=self.clock)

    @pytest.mark.asyncio
    async def test_track_normalizes_query(self):
        event = await self.service.track_search("  John DEERE ")

        assert event.query == "john deere"
        assert event.session_id.startswith("session_")

    @pytest.mark.asyncio
    async def test_blank_query_not_tracked(self):
        assert await self.service.track_search("   ") is None
        assert await self.store.get(self.service.storage_key) is None

    @pytest.mark.asyncio
    async def test_local_log_is_capped_most_recent_first(self):
        for i in range(7):
            await self.service.track_search(f"q{i}")

        events = await self.store.get(self.service.storage_key)

        assert [e["query"] for e in events] == ["q6", "q5", "q4", "q3", "q2"]

    @pytest.mark.asyncio
    async def test_popular_queries_counted(self):
        for query in ["tractor", "caballo", "tractor", "tractor", "caballo"]:
            await self.service.track_search(query)

        popular = await self.service.get_popular_queries(limit=2)

        assert popular == [{"query": "tractor", "count": 3}, {"query": "caballo", "count": 2}]

    @pytest.mark.asyncio
    async def test_trending_growth(self):
        self.service.max_local_events = 100
        self.clock.now -= 1.5 * DAY_MS / 1000
        await self.service.track_search("tractor")

        self.clock.now += 1.5 * DAY_MS / 1000
        await self.service.track_search("tractor")
        await self.service.track_search("tractor")
        await self.service.track_search("tractor")
        await self.service.track_search("caballo")
        await self.service.track_search("caballo")

        trends = await self.service.get_trending()

        assert trends == [
            {"query": "tractor", "growth": 200.0},
            {"query": "caballo", "growth": 100.0},
        ]

    @pytest.mark.asyncio
    async def test_single_recent_search_is_not_trending(self):
        await self.service.track_search("tractor")
        assert await self.service.get_trending() == []

    @pytest.mark.asyncio
    async def test_get_analytics_and_clear(self):
        await self.service.track_search("tractor")

        analytics = await self.service.get_analytics()
        assert analytics["popular_queries"] == [{"query": "tractor", "count": 1}]
        assert len(analytics["recent_searches"]) == 1

        await self.service.clear()
        assert await self.service.get_popular_queries() == []


class TestBatchSending:
    """Pending events are posted in batches and re-queued on failure."""

    @pytest.mark.asyncio
    async def test_batch_sent_when_full(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        async with make_client(handler) as client:
            service = SearchAnalyticsService(
                MemoryKeyValueStore(),
                endpoint_url="http://test/api/analytics/search",
                client=client,
                batch_size=2,
                session_id="session_test"
            )
            await service.track_search("tractor")
            assert bodies == []

            await service.track_search("caballo", result_count=4)

        assert len(bodies) == 1
        assert [e["query"] for e in bodies[0]["events"]] == ["tractor", "caballo"]
        assert bodies[0]["events"][0]["sessionId"] == "session_test"
        assert bodies[0]["events"][1]["resultCount"] == 4
        assert "timestamp" in bodies[0]
        assert service.pending_events == []

    @pytest.mark.asyncio
    async def test_failed_batch_is_requeued(self):
        async with make_client(lambda request: httpx.Response(503)) as client:
            service = SearchAnalyticsService(
                MemoryKeyValueStore(),
                endpoint_url="http://test/api/analytics/search",
                client=client,
                batch_size=10
            )
            await service.track_search("tractor")
            await service.track_search("caballo")

            assert await service.flush() is False

        assert [e.query for e in service.pending_events] == ["tractor", "caballo"]

    @pytest.mark.asyncio
    async def test_requeued_events_sent_on_next_flush(self):
        responses = iter([httpx.Response(500), httpx.Response(200)])
        sent = []

        def handler(request):
            sent.append(json.loads(request.content))
            return next(responses)

        async with make_client(handler) as client:
            service = SearchAnalyticsService(
                MemoryKeyValueStore(),
                endpoint_url="http://test/api/analytics/search",
                client=client
            )
            await service.track_search("tractor")

            assert await service.flush() is False
            assert await service.flush() is True

        assert len(sent) == 2
        assert service.pending_events == []

    @pytest.mark.asyncio
    async def test_without_endpoint_nothing_is_queued(self):
        service = SearchAnalyticsService(MemoryKeyValueStore())

        await service.track_search("tractor")

        assert service.pending_events == []
        assert await service.flush() is False

    @pytest.mark.asyncio
    async def test_aclose_flushes_pending(self):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content))
            return httpx.Response(200)

        async with make_client(handler) as client:
            service = SearchAnalyticsService(
                MemoryKeyValueStore(),
                endpoint_url="http://test/api/analytics/search",
                client=client
            )
            service.start(interval_seconds=60)
            await service.track_search("tractor")
            await service.aclose()

        assert [e["query"] for e in sent[0]["events"]] == ["tractor"]
