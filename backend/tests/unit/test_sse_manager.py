"""Unit tests for the SSEManager."""

import asyncio
import json

import pytest

from tripstore.application.services import SSEManager
from tripstore.application.services.sse_manager import STATE_EVENT
from tripstore.domain.entities import CollectionState, LoadState


@pytest.mark.asyncio
async def test_published_state_reaches_subscriber():
    manager = SSEManager()
    stream = manager.subscribe()
    task = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    assert manager.client_count == 1

    manager.publish_state(
        CollectionState(collection="destinations", records=({"id": "a"},), load_state=LoadState.READY)
    )
    message = await task

    event, data = message.strip().split("\n")
    assert event == f"event: {STATE_EVENT}"
    payload = json.loads(data.removeprefix("data: "))
    assert payload["collection"] == "destinations"
    assert payload["records"] == [{"id": "a"}]
    assert payload["load_state"] == "ready"

    await manager.shutdown()
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert manager.client_count == 0


@pytest.mark.asyncio
async def test_full_queue_disconnects_client():
    manager = SSEManager(max_queue_size=1)
    stream = manager.subscribe()
    task = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)

    manager.publish("ping", {"n": 1})
    assert await task == 'event: ping\ndata: {"n": 1}\n\n'

    manager.publish("ping", {"n": 2})
    manager.publish("ping", {"n": 3})

    assert manager.client_count == 0
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
