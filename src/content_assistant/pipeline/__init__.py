"""Pipeline stages: extraction, prompt assembly, generation and relay."""

from .generation import GenerationClient
from .relay import RelayState, StreamRelay
from .source_handler import SourceHandler

__all__ = ["GenerationClient", "RelayState", "SourceHandler", "StreamRelay"]
