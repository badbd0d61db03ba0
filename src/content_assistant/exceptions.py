"""Exceptions raised while turning a request into an analysis.

Every error that can end a request carries a stable ``code`` so the relay can
report it without inspecting the exception type.
"""


class ContentAssistantError(Exception):
    """Base exception for content assistant errors"""  # noqa: D415

    code = "internal_error"


class ConfigurationError(ContentAssistantError):
    """Raised when settings are missing or invalid"""  # noqa: D415

    code = "configuration_error"


class NoInputProvidedError(ContentAssistantError):
    """Raised when none of text, url, image or document is populated"""  # noqa: D415

    code = "no_input_provided"

    def __init__(self, message: str = "No input provided.") -> None:
        super().__init__(message)


class ConflictingInputError(ContentAssistantError):
    """Raised when more than one content source is populated"""  # noqa: D415

    code = "conflicting_input"


class InvalidInputError(ContentAssistantError):
    """Raised when a populated source cannot be decoded or is malformed"""  # noqa: D415

    code = "invalid_input"


class UnsupportedDocumentTypeError(ContentAssistantError):
    """Raised when a document is neither PDF nor DOCX"""  # noqa: D415

    code = "unsupported_document_type"

    def __init__(self, mime_type: str) -> None:
        super().__init__(f"Unsupported document type: {mime_type}")
        self.mime_type = mime_type


class ParseTimeoutError(ContentAssistantError):
    """Raised when a document parse exceeds its time bound"""  # noqa: D415

    code = "parse_timeout"

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"Operation timed out after {timeout_s:g} seconds.")
        self.timeout_s = timeout_s


class DocumentParseError(ContentAssistantError):
    """Raised when a parser rejects a corrupt or unreadable document"""  # noqa: D415

    code = "document_parse_error"


class ScrapeFailureError(ContentAssistantError):
    """Raised when both scraping tiers fail to produce page content"""  # noqa: D415

    code = "scrape_failure"

    def __init__(
        self,
        message: str = (
            "Failed to fetch dynamic content from URL. "
            "The page may be too complex or protected."
        ),
    ) -> None:
        super().__init__(message)


class GenerationFailureError(ContentAssistantError):
    """Raised when the model rejects the request or fails while streaming"""  # noqa: D415

    code = "generation_failure"


class ResultParseFailureError(ContentAssistantError):
    """Raised when the streamed text does not form a valid analysis"""  # noqa: D415

    code = "result_parse_failure"


class HistorySinkError(ContentAssistantError):
    """Raised by history sinks; logged, never surfaced to the client"""  # noqa: D415

    code = "history_sink_failure"
