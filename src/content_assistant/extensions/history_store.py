"""History sinks for completed analyses.

A sink receives one entry per successful request that has an owner identity.
Entries are never mutated; each sink applies its own retention bound.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
import dataclasses
from datetime import UTC, datetime
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from content_assistant.constants import DEFAULT_HISTORY_LIMIT
from content_assistant.exceptions import HistorySinkError
from content_assistant.response.types import AnalysisResult

if TYPE_CHECKING:
    import os

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One recorded analysis."""

    owner_id: str
    input_descriptor: str
    result: AnalysisResult
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "ownerId": self.owner_id,
            "inputText": self.input_descriptor,
            "createdAt": self.created_at.isoformat(),
            **self.result.to_wire(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        return cls(
            owner_id=str(data["ownerId"]),
            input_descriptor=str(data.get("inputText", "")),
            result=AnalysisResult.model_validate(data),
            created_at=datetime.fromisoformat(str(data["createdAt"])),
        )


@runtime_checkable
class HistorySink(Protocol):
    async def append(
        self, owner_id: str, input_descriptor: str, result: AnalysisResult
    ) -> HistoryEntry: ...

    async def list(self, owner_id: str) -> tuple[HistoryEntry, ...]: ...


def _new_entry(
    owner_id: str, input_descriptor: str, result: AnalysisResult
) -> HistoryEntry:
    if not owner_id:
        raise HistorySinkError("History entries require an owner id")
    return HistoryEntry(
        owner_id=owner_id,
        input_descriptor=input_descriptor,
        result=result,
        created_at=datetime.now(UTC),
    )


class InMemoryHistorySink:
    """Keeps the most recent ``limit`` entries per owner in process memory."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be positive")
        self.limit = limit
        self._entries: defaultdict[str, deque[HistoryEntry]] = defaultdict(
            lambda: deque(maxlen=self.limit)
        )

    async def append(
        self, owner_id: str, input_descriptor: str, result: AnalysisResult
    ) -> HistoryEntry:
        entry = _new_entry(owner_id, input_descriptor, result)
        self._entries[owner_id].appendleft(entry)
        return entry

    async def list(self, owner_id: str) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries.get(owner_id, ()))


class JSONHistorySink:
    """Append-only JSON file keyed by owner id.

    Uses copy-on-write: write to a temp file and rename for atomicity. Writes
    are serialized with a lock so concurrent requests in one process cannot
    lose each other's entries. Shape on disk:
      {"<owner id>": [{"inputText":..., "summary":..., "createdAt":...}, ...]}
    with the newest entry first.
    """

    def __init__(
        self, path: str | os.PathLike[str], limit: int | None = None
    ) -> None:
        self._path = Path(path)
        self.limit = limit
        self._lock = asyncio.Lock()

    async def append(
        self, owner_id: str, input_descriptor: str, result: AnalysisResult
    ) -> HistoryEntry:
        entry = _new_entry(owner_id, input_descriptor, result)
        async with self._lock:
            try:
                data = await asyncio.to_thread(self._read_all)
                records = data.get(owner_id, [])
                records.insert(0, entry.to_dict())
                if self.limit is not None:
                    del records[self.limit :]
                data[owner_id] = records
                await asyncio.to_thread(self._write_all, data)
            except OSError as e:
                raise HistorySinkError(f"Could not write {self._path}: {e}") from e
        return entry

    async def list(self, owner_id: str) -> tuple[HistoryEntry, ...]:
        data = await asyncio.to_thread(self._read_all)
        entries: list[HistoryEntry] = []
        for record in data.get(owner_id, []):
            try:
                entries.append(HistoryEntry.from_dict(record))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                logger.warning("Skipping unreadable history record: %s", e)
        return tuple(entries)

    def _read_all(self) -> dict[str, list[dict[str, Any]]]:
        if not self._path.exists():
            return {}
        try:
            result = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise HistorySinkError(f"Corrupt history file {self._path}: {e}") from e
        if not isinstance(result, dict):
            return {}
        return {k: v for k, v in result.items() if isinstance(v, list)}

    def _write_all(self, data: dict[str, list[dict[str, Any]]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        Path.replace(tmp, self._path)
