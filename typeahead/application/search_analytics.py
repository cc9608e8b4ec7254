"""
Search analytics tracker.

Keeps an anonymized local log of searches (popular queries, trends) and ships
pending events to the analytics endpoint in batches.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

import httpx
import structlog

from typeahead.domain.exceptions import StorageError
from typeahead.domain.interfaces import IKeyValueStore
from typeahead.schemas.suggestion_schemas import AnalyticsBatchPayload, SearchEventPayload

logger = structlog.get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


class SearchAnalyticsService:
    """
    Tracks searches for popularity and trend insights.

    Events are stored most-recent-first under one key (capped at
    ``max_local_events``) and queued for the endpoint. A batch is sent as soon
    as ``batch_size`` events are pending, on ``flush()``, and periodically
    once ``start()`` was called. Failed batches are put back in the queue.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        *,
        endpoint_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        batch_size: int = 10,
        max_local_events: int = 100,
        storage_key: str = "typeahead:search_analytics",
        session_id: Optional[str] = None,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.endpoint_url = endpoint_url
        self.batch_size = batch_size
        self.max_local_events = max_local_events
        self.storage_key = storage_key
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:12]}"
        self._clock = clock

        self._owns_client = client is None and endpoint_url is not None
        self._client = client
        self._pending: List[SearchEventPayload] = []
        self._flush_task: Optional[asyncio.Task] = None
        self._send_lock = asyncio.Lock()

    @property
    def pending_events(self) -> List[SearchEventPayload]:
        return list(self._pending)

    async def track_search(
        self,
        query: str,
        *,
        source: str = "header",
        result_count: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> Optional[SearchEventPayload]:
        """Record one search. Blank queries are ignored."""
        normalized = query.strip().lower()
        if not normalized:
            return None

        event = SearchEventPayload(
            query=normalized,
            timestamp=self._now_ms(),
            session_id=self.session_id,
            source=source,
            result_count=result_count,
            filters=filters
        )

        await self._save_local_event(event)

        if self.endpoint_url is not None:
            self._pending.append(event)
            if len(self._pending) >= self.batch_size:
                await self.flush()

        return event

    async def get_popular_queries(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most searched queries, highest count first."""
        events = await self._load_events()
        counts = Counter(event["query"] for event in events)
        return [
            {"query": query, "count": count}
            for query, count in counts.most_common(limit)
        ]

    async def get_trending(self, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Queries whose volume grew in the last 24h compared with the 24h before.

        Growth is a percentage. A query with no searches in the previous
        window counts as 100% growth when searched more than once recently.
        """
        events = await self._load_events()
        now = self._now_ms()
        one_day_ago = now - DAY_MS
        two_days_ago = now - 2 * DAY_MS

        recent: Counter = Counter()
        previous: Counter = Counter()
        for event in events:
            if event["timestamp"] >= one_day_ago:
                recent[event["query"]] += 1
            elif event["timestamp"] >= two_days_ago:
                previous[event["query"]] += 1

        trends = []
        for query, recent_count in recent.items():
            previous_count = previous.get(query, 0)
            if previous_count > 0:
                growth = (recent_count - previous_count) / previous_count * 100
            else:
                growth = 100.0 if recent_count > 1 else 0.0

            if growth > 0:
                trends.append({"query": query, "growth": growth})

        trends.sort(key=lambda t: t["growth"], reverse=True)
        return trends[:limit]

    async def get_analytics(self) -> Dict[str, Any]:
        """Popular queries, recent searches and trends in one document."""
        events = await self._load_events()
        return {
            "popular_queries": await self.get_popular_queries(10),
            "recent_searches": events[:20],
            "trends": await self.get_trending(5),
        }

    async def clear(self) -> None:
        """Drop local analytics data and the pending queue (privacy)."""
        self._pending.clear()
        try:
            await self.store.delete(self.storage_key)
        except StorageError as e:
            logger.warning("Failed to clear analytics", error=str(e))

    async def flush(self) -> bool:
        """
        Send pending events as one batch.

        Returns:
            True if a batch was delivered
        """
        async with self._send_lock:
            if not self._pending or self.endpoint_url is None:
                return False

            batch = list(self._pending)
            self._pending.clear()

            body = AnalyticsBatchPayload(events=batch, timestamp=self._now_ms())

            try:
                response = await self._get_client().post(
                    self.endpoint_url,
                    json=body.model_dump(mode="json", by_alias=True, exclude_none=True)
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                # Re-queue ahead of anything tracked while sending
                self._pending[:0] = batch
                logger.debug("Analytics batch failed", error=str(e), pending=len(self._pending))
                return False

            logger.debug("Analytics batch sent", count=len(batch))
            return True

    def start(self, interval_seconds: float = 30.0) -> None:
        """Flush pending events every ``interval_seconds`` until closed."""
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = asyncio.get_running_loop().create_task(
                self._periodic_flush(interval_seconds)
            )

    async def aclose(self) -> None:
        """Stop periodic sending, send what is pending and release the client."""
        if self._flush_task is not None:
            self._flush_task.cancel()
            try:
                await self._flush_task
            except asyncio.CancelledError:
                pass
            self._flush_task = None

        await self.flush()

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _periodic_flush(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.flush()
            except Exception as e:
                logger.error("Analytics periodic flush error", error=str(e))

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client

    async def _save_local_event(self, event: SearchEventPayload) -> None:
        events = await self._load_events()
        events.insert(0, event.model_dump(mode="json"))
        try:
            await self.store.set(self.storage_key, events[:self.max_local_events])
        except StorageError as e:
            logger.warning("Failed to save analytics event", error=str(e))

    async def _load_events(self) -> List[Dict[str, Any]]:
        try:
            stored = await self.store.get(self.storage_key)
        except StorageError as e:
            logger.warning("Failed to load analytics events", error=str(e))
            return []

        if not isinstance(stored, list):
            return []
        return [
            event for event in stored
            if isinstance(event, dict) and "query" in event and "timestamp" in event
        ]

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
