"""Provider-neutral adapter protocol for streaming generation.

Adapters translate neutral `ContentPart` values and `GenerationParams` into a
provider SDK call and yield plain text fragments. Failures must surface as
`GenerationFailureError`; the generation client adds timeouts and cleanup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from content_assistant.core.types import ContentPart, GenerationParams


@runtime_checkable
class GenerationAdapter(Protocol):
    """Minimal interface the pipeline needs from a model provider."""

    def stream(
        self,
        *,
        model_name: str,
        parts: Sequence[ContentPart],
        params: GenerationParams,
        safety_threshold: str,
    ) -> AsyncIterator[str]:
        """Start one generation and yield its text fragments in order."""
        ...
