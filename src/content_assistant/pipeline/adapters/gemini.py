"""Google GenAI streaming adapter."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
import logging
from typing import Any

from google import genai
from google.genai import types

from content_assistant.constants import RESPONSE_MIME_TYPE, SAFETY_CATEGORIES
from content_assistant.core.types import (
    BinaryPart,
    ContentPart,
    GenerationParams,
    TextPart,
)
from content_assistant.exceptions import (
    ConfigurationError,
    ContentAssistantError,
    GenerationFailureError,
)

from .base import GenerationAdapter

logger = logging.getLogger(__name__)


def to_genai_part(part: ContentPart) -> types.Part:
    match part:
        case TextPart(text=text):
            return types.Part.from_text(text=text)
        case BinaryPart(mime_type=mime_type, data=data):
            return types.Part.from_bytes(data=data, mime_type=mime_type)
    raise TypeError(f"Unsupported content part: {type(part).__name__}")


def build_config(
    params: GenerationParams, safety_threshold: str
) -> types.GenerateContentConfig:
    """Generation config with JSON output and the fixed safety categories."""
    threshold = types.HarmBlockThreshold(safety_threshold)
    return types.GenerateContentConfig(
        temperature=params.temperature,
        max_output_tokens=params.max_output_tokens,
        response_mime_type=RESPONSE_MIME_TYPE,
        safety_settings=[
            types.SafetySetting(
                category=types.HarmCategory(category), threshold=threshold
            )
            for category in SAFETY_CATEGORIES
        ],
    )


def _blocked_reason(chunk: Any) -> str | None:
    """Return a safety block description for a streamed response, if any."""
    feedback = getattr(chunk, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        return f"prompt blocked ({getattr(block_reason, 'value', block_reason)})"
    for candidate in getattr(chunk, "candidates", None) or ():
        if getattr(candidate, "finish_reason", None) == types.FinishReason.SAFETY:
            return "response blocked by safety filters"
    return None


class GoogleGenAIAdapter(GenerationAdapter):
    """Streams from ``client.aio.models.generate_content_stream``.

    Transient provider errors are not retried; every failure is reported once
    as `GenerationFailureError` carrying the provider's message.
    """

    def __init__(self, api_key: str | None = None, *, client: Any = None) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError("An API key is required for the Gemini API")
            client = genai.Client(api_key=api_key)
        self._client = client

    async def stream(
        self,
        *,
        model_name: str,
        parts: Sequence[ContentPart],
        params: GenerationParams,
        safety_threshold: str,
    ) -> AsyncIterator[str]:
        contents = [
            types.Content(role="user", parts=[to_genai_part(p) for p in parts])
        ]
        config = build_config(params, safety_threshold)
        try:
            response = await self._client.aio.models.generate_content_stream(
                model=model_name, contents=contents, config=config
            )
            async for chunk in response:
                if reason := _blocked_reason(chunk):
                    raise GenerationFailureError(f"The model refused: {reason}.")
                text = chunk.text
                if text:
                    yield text
        except ContentAssistantError:
            raise
        except Exception as e:
            logger.debug("Gemini stream failed: %s", e, exc_info=True)
            raise GenerationFailureError(str(e) or type(e).__name__) from e
