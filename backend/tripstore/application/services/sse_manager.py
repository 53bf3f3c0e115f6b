"""SSE Manager — in-process event broadcaster for collection state changes."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from tripstore.domain.entities import CollectionState

logger = logging.getLogger(__name__)

STATE_EVENT = "collection_state"


class SSEManager:
    """Manages SSE client connections and broadcasts collection updates.

    Each connected client gets its own asyncio.Queue. Broadcasting pushes
    the event to all queues. Clients consume events via an async generator.
    """

    def __init__(self, max_queue_size: int = 256) -> None:
        self._queues: list[asyncio.Queue[str | None]] = []
        self._max_queue_size = max_queue_size

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Subscribe to SSE events. Yields formatted SSE strings.

        The generator automatically unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._max_queue_size)
        self._queues.append(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    def publish(self, event_type: str, data: dict[str, Any]) -> None:
        """Push an event to every connected client without awaiting."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(sse_message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full, disconnecting")

        for q in dead_queues:
            self._queues.remove(q)
            # make room for the sentinel so the consumer loop ends
            while not q.empty():
                q.get_nowait()
            q.put_nowait(None)

    def publish_state(self, state: CollectionState) -> None:
        """Store listener: forward a collection state change to all clients."""
        self.publish(STATE_EVENT, state.to_dict())

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queue in self._queues:
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)
