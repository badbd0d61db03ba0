"""Turning URLs and uploaded documents into plain text."""

from .documents import DEFAULT_EXTRACTORS, DocumentParser
from .scraper import HybridScraper, PageRenderer, PlaywrightRenderer

__all__ = [
    "DEFAULT_EXTRACTORS",
    "DocumentParser",
    "HybridScraper",
    "PageRenderer",
    "PlaywrightRenderer",
]
