"""Extraction stage of the pipeline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from content_assistant.constants import IMAGE_INPUT_DESCRIPTOR
from content_assistant.core.types import (
    BinaryPart,
    DocumentInput,
    ExtractedContent,
    Failure,
    ImageInput,
    InputEnvelope,
    InputSource,
    Result,
    Success,
    TextInput,
    UrlInput,
)
from content_assistant.exceptions import ContentAssistantError
from content_assistant.pipeline.base import BaseAsyncHandler
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from content_assistant.extraction import DocumentParser, HybridScraper
    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)


class SourceHandler(
    BaseAsyncHandler[InputEnvelope, ExtractedContent, ContentAssistantError]
):
    """Converts the populated input source into model-ready content.

    Text passes through untouched, URLs go through the hybrid scraper,
    documents through the document parser, and images are forwarded as a
    binary part without any parsing.
    """

    def __init__(
        self,
        scraper: HybridScraper,
        parser: DocumentParser,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._scraper = scraper
        self._parser = parser
        self._telemetry = telemetry or TelemetryContext()

    async def handle(
        self, command: InputEnvelope
    ) -> Result[ExtractedContent, ContentAssistantError]:
        """Extract the envelope's source into an `ExtractedContent`."""
        try:
            with self._telemetry(f"extract.{command.kind}"):
                return Success(await self._extract(command.source))
        except ContentAssistantError as e:
            return Failure(e)
        except Exception as e:
            logger.exception("Unexpected failure extracting %s input", command.kind)
            return Failure(ContentAssistantError(f"Failed to extract input: {e}"))

    async def _extract(self, source: InputSource) -> ExtractedContent:
        match source:
            case TextInput(text=text):
                return ExtractedContent(kind="text", descriptor=text, text=text)
            case UrlInput(url=url):
                scraped = await self._scraper.scrape(url)
                return ExtractedContent(kind="url", descriptor=url, text=scraped)
            case ImageInput(mime_type=mime_type, data=data, prompt=prompt):
                return ExtractedContent(
                    kind="image",
                    descriptor=IMAGE_INPUT_DESCRIPTOR,
                    text=prompt,
                    binary=BinaryPart(mime_type=mime_type, data=data),
                )
            case DocumentInput(name=name):
                parsed = await self._parser.parse(source)
                return ExtractedContent(
                    kind="document", descriptor=f"Document: {name}", text=parsed
                )
