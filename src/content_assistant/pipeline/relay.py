"""Stream relay: forwards model fragments and emits one terminal event.

One `StreamRelay` serves exactly one request and owns that request's
accumulation buffer. Its lifecycle is::

    IDLE -> STREAMING -> FINALIZING -> COMPLETED
      |         |            |
      +---------+------------+------> FAILED

Fragments are forwarded as `ChunkEvent`s as they arrive. The buffer is only
parsed once the model stream is exhausted; a parse failure ends the request
with an `ErrorEvent` even though the chunks were already delivered.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing
from enum import StrEnum
import logging
from typing import TYPE_CHECKING

from content_assistant.constants import HISTORY_TIMEOUT
from content_assistant.core.types import ChunkEvent, ErrorEvent, FinalEvent
from content_assistant.exceptions import ContentAssistantError
from content_assistant.response.processor import parse_analysis
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from content_assistant.core.types import StreamEvent
    from content_assistant.extensions.history_store import HistorySink
    from content_assistant.response.types import AnalysisResult
    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

ERROR_PREFIX = "An error occurred: "


class RelayState(StrEnum):
    """Lifecycle of a single relayed request."""

    IDLE = "idle"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS: dict[RelayState, frozenset[RelayState]] = {
    RelayState.IDLE: frozenset(
        {RelayState.STREAMING, RelayState.FINALIZING, RelayState.FAILED}
    ),
    RelayState.STREAMING: frozenset({RelayState.FINALIZING, RelayState.FAILED}),
    RelayState.FINALIZING: frozenset({RelayState.COMPLETED, RelayState.FAILED}),
    RelayState.COMPLETED: frozenset(),
    RelayState.FAILED: frozenset(),
}


class StreamRelay:
    """Relays one model stream to one client.

    Args:
        history: Sink for the parsed result; skipped when ``owner_id`` is None.
        owner_id: Opaque identity of the caller, or None for anonymous use.
        input_descriptor: Short description of the input stored with history.
        history_timeout_s: Bound on the history write.
    """

    def __init__(
        self,
        *,
        history: HistorySink | None = None,
        owner_id: str | None = None,
        input_descriptor: str = "",
        history_timeout_s: float = HISTORY_TIMEOUT,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._history = history
        self._owner_id = owner_id
        self.input_descriptor = input_descriptor
        self._history_timeout_s = history_timeout_s
        self._telemetry = telemetry or TelemetryContext()
        self._state = RelayState.IDLE
        self._buffer: list[str] = []
        self._result: AnalysisResult | None = None

    @property
    def state(self) -> RelayState:
        return self._state

    @property
    def buffer(self) -> str:
        """Concatenation of every fragment forwarded so far."""
        return "".join(self._buffer)

    @property
    def result(self) -> AnalysisResult | None:
        return self._result

    def _transition(self, target: RelayState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Invalid relay transition {self._state.value} -> {target.value}"
            )
        logger.debug("Relay %s -> %s", self._state.value, target.value)
        self._state = target

    def fail(self, error: BaseException) -> ErrorEvent:
        """Move to FAILED and build the terminal error event for ``error``."""
        self._transition(RelayState.FAILED)
        self._telemetry.count("relay.error")
        if isinstance(error, ContentAssistantError):
            logger.info("Request failed (%s): %s", error.code, error)
            code = error.code
        else:
            logger.error("Unexpected error while relaying: %s", error, exc_info=error)
            code = ContentAssistantError.code
        return ErrorEvent(message=f"{ERROR_PREFIX}{error}", code=code)

    async def run(
        self, chunks: AsyncIterator[str]
    ) -> AsyncGenerator[StreamEvent, None]:
        """Relay ``chunks`` and finish with exactly one terminal event.

        Closing this generator early closes ``chunks`` as well. The history
        write, when applicable, happens after the final event is handed out.
        """
        if self._state is not RelayState.IDLE:
            raise RuntimeError("A StreamRelay can only be run once")

        try:
            async with aclosing(_as_generator(chunks)) as fragments:
                async for text in fragments:
                    if self._state is RelayState.IDLE:
                        self._transition(RelayState.STREAMING)
                    self._buffer.append(text)
                    yield ChunkEvent(text=text)
            self._transition(RelayState.FINALIZING)
            result = parse_analysis(self.buffer)
        except (GeneratorExit, asyncio.CancelledError):
            logger.info("Client went away; relay stopped in state %s", self._state)
            self._state = RelayState.FAILED
            raise
        except Exception as e:
            yield self.fail(e)
            return

        self._transition(RelayState.COMPLETED)
        self._result = result
        try:
            yield FinalEvent()
        finally:
            await self._record(result)

    async def _record(self, result: AnalysisResult) -> None:
        if self._history is None or self._owner_id is None:
            return
        try:
            async with asyncio.timeout(self._history_timeout_s):
                await self._history.append(
                    self._owner_id, self.input_descriptor, result
                )
        except Exception as e:
            self._telemetry.count("history.failed")
            logger.warning(
                "History write for %s failed: %s", self._owner_id, e, exc_info=True
            )


async def _as_generator(chunks: AsyncIterator[str]) -> AsyncGenerator[str, None]:
    """Expose any async iterator through an ``aclose``-able generator."""
    try:
        async for text in chunks:
            yield text
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()
