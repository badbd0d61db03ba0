"""Content assistant: streaming summaries, action items and next steps.

Accepts raw text, a URL, an image or a PDF/DOCX document, turns it into model
input, and relays the model's streamed JSON analysis as chunk events followed
by exactly one terminal event.
"""

import importlib.metadata
import logging

from content_assistant.config import AssistantSettings, config_scope, resolve_config
from content_assistant.core.types import (
    ChunkEvent,
    ErrorEvent,
    FinalEvent,
    GenerationParams,
    InputEnvelope,
    StreamEvent,
)
from content_assistant.exceptions import ContentAssistantError
from content_assistant.executor import ContentAssistant, create_assistant
from content_assistant.extensions.history_store import (
    HistoryEntry,
    HistorySink,
    InMemoryHistorySink,
    JSONHistorySink,
)
from content_assistant.response import AnalysisResult
from content_assistant.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("content-assistant")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AnalysisResult",
    "AssistantSettings",
    "ChunkEvent",
    "ContentAssistant",
    "ContentAssistantError",
    "ErrorEvent",
    "FinalEvent",
    "GenerationParams",
    "HistoryEntry",
    "HistorySink",
    "InMemoryHistorySink",
    "InputEnvelope",
    "JSONHistorySink",
    "StreamEvent",
    "TelemetryContext",
    "TelemetryReporter",
    "config_scope",
    "create_assistant",
    "resolve_config",
]
