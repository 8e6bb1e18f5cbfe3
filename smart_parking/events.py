import asyncio
import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


# In-memory pubsub for SSE; every subscriber gets its own bounded queue
class EventBus:
    def __init__(self, max_pending: int = 100) -> None:
        self._subscribers: set[asyncio.Queue[str]] = set()
        self._max_pending = max_pending

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[str]:
        q: asyncio.Queue[str] = asyncio.Queue(maxsize=self._max_pending)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue[str]) -> None:
        self._subscribers.discard(q)

    async def publish(self, data: str) -> None:
        for q in list(self._subscribers):
            try:
                q.put_nowait(data)
            except asyncio.QueueFull:
                logger.warning("Dropping event for slow subscriber (%d pending)", q.qsize())

    async def publish_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        await self.publish(json.dumps({"type": event_type, **payload}))
