"""Server-sent event framing."""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from content_assistant.core.types import StreamEvent

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_event(event: StreamEvent) -> str:
    """One ``data: <json>`` frame terminated by a blank line."""
    return f"data: {json.dumps(event.to_frame(), ensure_ascii=False)}\n\n"


async def event_stream(
    events: AsyncGenerator[StreamEvent, None],
) -> AsyncIterator[str]:
    """Frame ``events``; the event source is closed however the response ends."""
    async with aclosing(events) as source:
        async for event in source:
            yield encode_event(event)
