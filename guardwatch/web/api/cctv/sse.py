"""Server-Sent Events (SSE) stream of CCTV events."""

import asyncio
import json
from collections import deque
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from ....core.dispatcher import EventDispatcher
from ....shared.redis.pubsub import event_message, get_event_subscriber
from ....shared.schemas.event import CCTVEvent
from ...auth.dependencies import CurrentUser
from ...dependencies import Dispatcher

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}
HEARTBEAT_SECONDS = 30.0
QUEUE_SIZE = 100


async def _relay_redis(queue: asyncio.Queue) -> None:
    """Forward events published by other instances into the client queue."""
    subscriber = None
    try:
        subscriber = await get_event_subscriber()
        async for envelope in subscriber.subscribe():
            try:
                queue.put_nowait(envelope)
            except asyncio.QueueFull:
                pass  # Client is too slow, skip this event
    except asyncio.CancelledError:
        raise
    except Exception as e:
        print(f"[SSE] Redis relay unavailable: {e}")
    finally:
        if subscriber:
            await subscriber.unsubscribe()


async def event_generator(
    request: Request,
    dispatcher: Optional[EventDispatcher],
    camera_id: Optional[str] = None,
    use_redis: bool = False,
) -> AsyncGenerator[dict, None]:
    """
    Generate SSE events for one client.

    The client gets its own dispatcher subscription (synthesized and
    published events). When Redis is up, events published by other
    instances are merged in; duplicates are dropped by event id.

    Yields:
        SSE event dictionaries
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)

    def enqueue(event: CCTVEvent) -> None:
        try:
            queue.put_nowait(event_message(event))
        except asyncio.QueueFull:
            pass

    subscription = dispatcher.subscribe(enqueue) if dispatcher else None
    relay = asyncio.create_task(_relay_redis(queue)) if use_redis else None
    seen: deque = deque(maxlen=QUEUE_SIZE * 2)

    try:
        yield {
            "event": "connected",
            "data": json.dumps({
                "status": "connected",
                "mode": "redis" if use_redis else "direct",
                "camera_id": camera_id,
            }),
        }

        while True:
            if await request.is_disconnected():
                break

            try:
                envelope = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_SECONDS)
            except asyncio.TimeoutError:
                yield {"event": "heartbeat", "data": json.dumps({"status": "ok"})}
                continue

            data = envelope.get("data", {})
            event_id = data.get("id")
            if event_id in seen:
                continue
            seen.append(event_id)
            if camera_id and data.get("camera_id") != camera_id:
                continue

            yield {
                "event": envelope.get("type", "message"),
                "data": json.dumps(data),
            }

    except asyncio.CancelledError:
        pass
    finally:
        if subscription:
            subscription.cancel()
        if relay:
            relay.cancel()
            try:
                await relay
            except asyncio.CancelledError:
                pass
        print("[SSE] Client disconnected")


@router.get("/events/stream")
async def sse_events(
    request: Request,
    auth: CurrentUser,
    dispatcher: Dispatcher,
    camera_id: Optional[str] = None,
):
    """
    Subscribe to real-time CCTV events via Server-Sent Events.

    Event types:
    - connected: Connection established
    - cctv_event: A CCTV event (optionally filtered by camera_id)
    - heartbeat: Keep-alive ping
    """
    use_redis = bool(getattr(request.app.state, "redis_enabled", False))
    return EventSourceResponse(
        event_generator(request, dispatcher, camera_id, use_redis),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
