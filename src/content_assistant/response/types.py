"""
Structured analysis returned by the model

The model is instructed to answer with a single JSON object carrying a
summary, action items and next steps. Empty lists are never stored: they are
replaced by single-element sentinel lists so downstream consumers can tell
"nothing found" apart from "field missing".
"""  # noqa: D212, D415

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_assistant.constants import NO_ACTION_ITEMS, NO_NEXT_STEPS


def _normalize_items(value: Any, sentinel: str) -> list[str]:
    if value is None:
        return [sentinel]
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list | tuple):
        raise ValueError("must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("must be a list of strings")
        if item.strip():
            items.append(item.strip())
    return items or [sentinel]


class AnalysisResult(BaseModel):
    """Summary, action items and next steps for one analysed input"""  # noqa: D415

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    summary: str
    action_items: list[str] = Field(
        default_factory=lambda: [NO_ACTION_ITEMS], alias="actionItems"
    )
    next_steps: list[str] = Field(
        default_factory=lambda: [NO_NEXT_STEPS], alias="nextSteps"
    )

    @field_validator("summary", mode="before")
    @classmethod
    def _strip_summary(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("action_items", mode="before")
    @classmethod
    def _action_items_sentinel(cls, v: Any) -> list[str]:
        return _normalize_items(v, NO_ACTION_ITEMS)

    @field_validator("next_steps", mode="before")
    @classmethod
    def _next_steps_sentinel(cls, v: Any) -> list[str]:
        return _normalize_items(v, NO_NEXT_STEPS)

    @property
    def has_action_items(self) -> bool:
        """True unless the action items are the sentinel list"""  # noqa: D415
        return self.action_items != [NO_ACTION_ITEMS]

    def to_wire(self) -> dict[str, Any]:
        """Camel-cased mapping, the shape the browser client and history use"""  # noqa: D415
        return self.model_dump(by_alias=True)
