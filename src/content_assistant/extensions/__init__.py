"""Add-ons that sit outside the request pipeline.

- History: sinks that record completed analyses per owner identity.
"""

from .history_store import (
    HistoryEntry,
    HistorySink,
    InMemoryHistorySink,
    JSONHistorySink,
)

__all__ = ["HistoryEntry", "HistorySink", "InMemoryHistorySink", "JSONHistorySink"]
