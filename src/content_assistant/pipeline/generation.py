"""Generation stage: one streaming model call per request."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
import logging
from typing import TYPE_CHECKING

from content_assistant.constants import (
    CHUNK_TIMEOUT,
    DEFAULT_MODEL,
    DEFAULT_SAFETY_THRESHOLD,
)
from content_assistant.exceptions import (
    ContentAssistantError,
    GenerationFailureError,
)
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from content_assistant.core.types import ContentPart, GenerationParams
    from content_assistant.pipeline.adapters.base import GenerationAdapter
    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)


class GenerationClient:
    """Wraps an adapter with a per-chunk deadline and guaranteed cleanup.

    The returned stream is lazy and can be consumed once. Closing it early
    (for example when the client disconnects) closes the provider stream.
    """

    def __init__(
        self,
        adapter: GenerationAdapter,
        *,
        model_name: str = DEFAULT_MODEL,
        safety_threshold: str = DEFAULT_SAFETY_THRESHOLD,
        chunk_timeout_s: float = CHUNK_TIMEOUT,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.adapter = adapter
        self.model_name = model_name
        self.safety_threshold = safety_threshold
        self._chunk_timeout_s = chunk_timeout_s
        self._telemetry = telemetry or TelemetryContext()

    async def stream(
        self, parts: Sequence[ContentPart], params: GenerationParams
    ) -> AsyncIterator[str]:
        """Yield text fragments from the model in the order received.

        Raises:
            GenerationFailureError: On provider errors, safety blocks, or when
                no fragment arrives within the chunk timeout.
        """
        logger.debug(
            "Starting %s stream (%d parts, temperature=%s, max_output_tokens=%d)",
            self.model_name,
            len(parts),
            params.temperature,
            params.max_output_tokens,
        )
        upstream = self.adapter.stream(
            model_name=self.model_name,
            parts=parts,
            params=params,
            safety_threshold=self.safety_threshold,
        )
        count = 0
        try:
            while True:
                try:
                    async with asyncio.timeout(self._chunk_timeout_s):
                        text = await anext(upstream)
                except StopAsyncIteration:
                    break
                except TimeoutError as e:
                    raise GenerationFailureError(
                        "The model did not respond within "
                        f"{self._chunk_timeout_s:g} seconds."
                    ) from e
                except ContentAssistantError:
                    raise
                except Exception as e:
                    raise GenerationFailureError(str(e) or type(e).__name__) from e
                count += 1
                yield text
        finally:
            aclose = getattr(upstream, "aclose", None)
            if aclose is not None:
                await aclose()
            self._telemetry.metric("generate.chunks", count)
            logger.debug("Stream from %s ended after %d chunks", self.model_name, count)
