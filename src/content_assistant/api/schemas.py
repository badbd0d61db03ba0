"""Request and response models for the HTTP surface."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from content_assistant.extensions.history_store import HistoryEntry


class GenerateContentRequest(BaseModel):
    """Body of ``POST /generate-content``.

    Fields are loosely typed on purpose: malformed values are reported by the
    envelope as an ``error`` frame rather than as a 422 response.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Any = None
    url: Any = None
    image: Any = None
    document: Any = None
    temperature: Any = None
    max_output_tokens: Any = Field(default=None, alias="maxOutputTokens")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class HistoryItem(BaseModel):
    """One entry of ``GET /history``."""

    model_config = ConfigDict(populate_by_name=True)

    input_text: str = Field(alias="inputText")
    summary: str
    action_items: list[str] = Field(alias="actionItems")
    next_steps: list[str] = Field(alias="nextSteps")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryItem":
        return cls(
            input_text=entry.input_descriptor,
            summary=entry.result.summary,
            action_items=list(entry.result.action_items),
            next_steps=list(entry.result.next_steps),
            created_at=entry.created_at,
        )
