"""
SSE (Server-Sent Events) helper for streaming scan progress to a single client.

A ProgressChannel is an ordered, single-consumer queue owned by one scan run.
The producer never blocks: publishing to a closed channel (client gone) is a
no-op, so the workflow keeps updating the database whether or not anyone is
listening.
"""

import asyncio
import json
from typing import Any, AsyncGenerator, Dict, Literal, Optional

from app.platform.logger import get_logger

logger = get_logger(__name__)

EventKey = Literal["running", "completed", "error"]

TERMINAL_KEYS = ("completed", "error")


class ProgressChannel:
    def __init__(self, correlation_id: str):
        self.correlation_id = correlation_id
        self._queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, key: EventKey, data: Any) -> bool:
        """
        Queue an event for the client.

        Returns:
            True if queued, False if the channel is already closed
        """
        logger.info(f"[{self.correlation_id}] Sending frontend event: {key} - {data}")

        if self._closed:
            return False

        self._queue.put_nowait({"key": key, "data": data})

        if key in TERMINAL_KEYS:
            self._closed = True
            self._queue.put_nowait(None)
        return True

    def close(self) -> None:
        """Tear down the channel, e.g. when the client disconnects."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def events(self) -> AsyncGenerator[Dict[str, Any], None]:
        """Yield events in publish order until a terminal event or close()."""
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event


async def sse_event_stream(channel: ProgressChannel) -> AsyncGenerator[dict, None]:
    """
    Format channel events for sse-starlette.

    Each message is a bare `data:` line carrying {"key": ..., "data": ...}.
    If the client disconnects the generator is cancelled and the channel closed,
    the workflow itself is left running.
    """
    try:
        async for event in channel.events():
            yield {"data": json.dumps(event)}
    finally:
        channel.close()
        logger.info(f"[{channel.correlation_id}] SSE: Closed connection")
