"""Deterministic adapter used when the real API is disabled (no network)."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
import json
import re

from content_assistant.constants import NO_ACTION_ITEMS, NO_NEXT_STEPS
from content_assistant.core.types import (
    BinaryPart,
    ContentPart,
    GenerationParams,
    TextPart,
)

from .base import GenerationAdapter

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class MockAdapter(GenerationAdapter):
    """Echoes the request content back as a well-formed analysis.

    Every sentence of the content becomes an action item, so the output is
    predictable for tests and demos. The JSON document is streamed in
    ``chunk_size`` slices, which deliberately split its syntax mid-token.
    """

    def __init__(self, chunk_size: int = 24, max_items: int = 5) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.max_items = max_items

    async def stream(
        self,
        *,
        model_name: str,  # noqa: ARG002
        parts: Sequence[ContentPart],
        params: GenerationParams,  # noqa: ARG002
        safety_threshold: str,  # noqa: ARG002
    ) -> AsyncIterator[str]:
        document = json.dumps(self._analysis(parts))
        for start in range(0, len(document), self.chunk_size):
            yield document[start : start + self.chunk_size]

    def _analysis(self, parts: Sequence[ContentPart]) -> dict[str, object]:
        # First part is the instruction; the rest is what the user sent
        described: list[str] = []
        for part in parts[1:]:
            if isinstance(part, BinaryPart):
                described.append(f"[{part.mime_type}, {len(part.data)} bytes]")
            elif isinstance(part, TextPart) and part.text.strip():
                described.append(part.text.strip())
        content = " ".join(described)

        sentences = [s.strip() for s in _SENTENCE_END.split(content) if s.strip()]
        return {
            "summary": f"echo: {content[:200]}",
            "actionItems": sentences[: self.max_items] or [NO_ACTION_ITEMS],
            "nextSteps": [NO_NEXT_STEPS],
        }
