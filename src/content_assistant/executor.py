"""The primary user-facing entry point for the pipeline.

`ContentAssistant` wires the stages together for one request at a time:
envelope -> extraction -> prompt assembly -> generation -> relay. Every
collaborator that talks to the outside world (model adapter, scraper,
document parser, history sink) is injected at construction, so tests can
replace each one with a fake. Nothing here is a module-level singleton.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from contextlib import aclosing
import logging
from typing import TYPE_CHECKING, Any

from content_assistant.config import AssistantSettings, resolve_config
from content_assistant.core.types import Failure, GenerationParams, InputEnvelope
from content_assistant.extensions.history_store import (
    HistorySink,
    InMemoryHistorySink,
    JSONHistorySink,
)
from content_assistant.extraction import DocumentParser, HybridScraper
from content_assistant.pipeline.adapters import GoogleGenAIAdapter, MockAdapter
from content_assistant.pipeline.generation import GenerationClient
from content_assistant.pipeline.prompts import assemble_parts
from content_assistant.pipeline.relay import StreamRelay
from content_assistant.pipeline.source_handler import SourceHandler
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from content_assistant.core.types import StreamEvent
    from content_assistant.pipeline.adapters import GenerationAdapter
    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)


class ContentAssistant:
    """Turns one request into a stream of chunk events and a terminal event.

    Args:
        config: Resolved settings.
        adapter: Model adapter. Defaults to the Gemini adapter when
            ``config.use_real_api`` is set and to `MockAdapter` otherwise.
        scraper: URL scraper; built from the configured timeouts by default.
        parser: Document parser; built from the configured timeout by default.
        history: History sink. A JSON file sink when ``config.history_path``
            is set, otherwise a bounded in-memory sink.
    """

    def __init__(
        self,
        config: AssistantSettings,
        *,
        adapter: GenerationAdapter | None = None,
        scraper: HybridScraper | None = None,
        parser: DocumentParser | None = None,
        history: HistorySink | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.config = config
        self._telemetry = telemetry or TelemetryContext()
        self.history = history or _default_history(config)

        scraper = scraper or HybridScraper(
            fetch_timeout_s=config.fetch_timeout_s,
            render_timeout_s=config.render_timeout_s,
            min_content_chars=config.min_content_chars,
            max_chars=config.max_url_chars,
            telemetry=self._telemetry,
        )
        parser = parser or DocumentParser(
            timeout_s=config.parse_timeout_s, telemetry=self._telemetry
        )
        self._source_handler = SourceHandler(
            scraper, parser, telemetry=self._telemetry
        )
        self._generation = GenerationClient(
            adapter or _default_adapter(config),
            model_name=config.model,
            safety_threshold=config.safety_threshold,
            chunk_timeout_s=config.chunk_timeout_s,
            telemetry=self._telemetry,
        )

    def build_envelope(self, fields: Mapping[str, Any]) -> InputEnvelope:
        """Build an envelope from raw request fields.

        Accepts both ``maxOutputTokens`` (wire name) and ``max_output_tokens``.
        Generation parameters fall back to the configured defaults.
        """
        max_tokens = fields.get("maxOutputTokens", fields.get("max_output_tokens"))
        params = GenerationParams.coerce(
            fields.get("temperature"),
            max_tokens,
            default_temperature=self.config.default_temperature,
            default_max_output_tokens=self.config.default_max_output_tokens,
        )
        return InputEnvelope.from_fields(
            text=fields.get("text"),
            url=fields.get("url"),
            image=fields.get("image"),
            document=fields.get("document"),
            params=params,
        )

    async def stream(
        self,
        request: InputEnvelope | Mapping[str, Any],
        *,
        owner_id: str | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """Process one request and yield its events.

        Never raises for request-level failures: every error becomes the
        single terminal `ErrorEvent`. Closing the generator early releases the
        model stream.
        """
        try:
            envelope = (
                request
                if isinstance(request, InputEnvelope)
                else self.build_envelope(request)
            )
        except Exception as e:
            yield self._new_relay(owner_id).fail(e)
            return

        extracted = await self._source_handler.handle(envelope)
        if isinstance(extracted, Failure):
            yield self._new_relay(owner_id).fail(extracted.error)
            return

        content = extracted.value
        try:
            parts = assemble_parts(content, self.config.instruction_template)
        except Exception as e:
            yield self._new_relay(owner_id).fail(e)
            return

        relay = self._new_relay(owner_id, content.descriptor)
        chunks = self._generation.stream(parts, envelope.params)
        async with aclosing(relay.run(chunks)) as events:
            async for event in events:
                yield event

    def _new_relay(self, owner_id: str | None, descriptor: str = "") -> StreamRelay:
        return StreamRelay(
            history=self.history,
            owner_id=owner_id,
            input_descriptor=descriptor,
            history_timeout_s=self.config.history_timeout_s,
            telemetry=self._telemetry,
        )


def _default_adapter(config: AssistantSettings) -> GenerationAdapter:
    if config.use_real_api:
        return GoogleGenAIAdapter(config.api_key)
    logger.info("use_real_api is off; responses come from the offline mock adapter")
    return MockAdapter()


def _default_history(config: AssistantSettings) -> HistorySink:
    if config.history_path:
        return JSONHistorySink(config.history_path)
    return InMemoryHistorySink(limit=config.history_limit)


def create_assistant(
    config: AssistantSettings | None = None,
    **collaborators: Any,
) -> ContentAssistant:
    """Create an assistant with optional configuration.

    If no configuration is provided, it is resolved from the environment.
    Keyword arguments are forwarded to `ContentAssistant` to replace the
    default adapter, scraper, parser, history sink or telemetry context.
    """
    # This is the only place where ambient configuration is resolved.
    final_config = config if config is not None else resolve_config()
    return ContentAssistant(final_config, **collaborators)
