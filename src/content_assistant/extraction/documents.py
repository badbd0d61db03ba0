"""PDF and DOCX text extraction with a hard time bound."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
import io
import logging
from time import perf_counter
from types import MappingProxyType
from typing import TYPE_CHECKING

from docx import Document
from pypdf import PdfReader

from content_assistant.constants import (
    DOCX_MIME_TYPE,
    PARSE_TIMEOUT,
    PARSE_WORKERS,
    PDF_MIME_TYPE,
)
from content_assistant.exceptions import (
    DocumentParseError,
    ParseTimeoutError,
    UnsupportedDocumentTypeError,
)
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from content_assistant.core.types import DocumentInput
    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

type TextExtractor = Callable[[bytes], str]


def extract_pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(p.strip() for p in pages if p.strip())


def extract_docx_text(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


DEFAULT_EXTRACTORS: Mapping[str, TextExtractor] = MappingProxyType(
    {
        PDF_MIME_TYPE: extract_pdf_text,
        DOCX_MIME_TYPE: extract_docx_text,
    }
)


def _base_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


class DocumentParser:
    """Dispatches a document to the extractor registered for its mime type.

    Extractors are synchronous library calls; they run on the parser's own
    pool of ``max_workers`` threads so the event loop keeps serving other
    requests. When the bound elapses the request fails immediately even
    though the worker may still be finishing; a stuck parse can only tie up
    this pool, never the loop's default executor used by the history sink.
    """

    def __init__(
        self,
        *,
        timeout_s: float = PARSE_TIMEOUT,
        extractors: Mapping[str, TextExtractor] | None = None,
        max_workers: int = PARSE_WORKERS,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._extractors = {
            _base_mime(k): v for k, v in (extractors or DEFAULT_EXTRACTORS).items()
        }
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="document-parse"
        )
        self._telemetry = telemetry or TelemetryContext()

    def supports(self, mime_type: str) -> bool:
        return _base_mime(mime_type) in self._extractors

    async def parse(self, document: DocumentInput) -> str:
        """Extract plain text from ``document``.

        Raises:
            UnsupportedDocumentTypeError: Before any work, for unknown types.
            ParseTimeoutError: If extraction exceeds the configured bound.
            DocumentParseError: If the underlying library rejects the file or
                the document has no extractable text (e.g. a scanned PDF).
        """
        extractor = self._extractors.get(_base_mime(document.mime_type))
        if extractor is None:
            raise UnsupportedDocumentTypeError(document.mime_type)

        start = perf_counter()
        loop = asyncio.get_running_loop()
        with self._telemetry("document.parse", mime_type=document.mime_type):
            try:
                async with asyncio.timeout(self._timeout_s):
                    text = await loop.run_in_executor(
                        self._pool, extractor, document.data
                    )
            except TimeoutError as e:
                raise ParseTimeoutError(self._timeout_s) from e
            except Exception as e:
                raise DocumentParseError(
                    f"Could not read document '{document.name}': {e}"
                ) from e

        if not text.strip():
            raise DocumentParseError(
                f"Document '{document.name}' contains no extractable text."
            )

        logger.debug(
            "Parsed %s (%d bytes) into %d chars in %.3fs",
            document.name,
            len(document.data),
            len(text),
            perf_counter() - start,
        )
        return text
