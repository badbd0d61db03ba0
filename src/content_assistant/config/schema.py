"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment and programmatic overrides into the correct types
with proper defaults. Credentials are always injected, never hardcoded.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_assistant import constants


class AssistantSettings(BaseSettings):
    """Pydantic settings schema for the content assistant.

    Fields read from ``CONTENT_ASSISTANT_*`` environment variables. The model
    credential and model name also accept the conventional ``GEMINI_API_KEY``
    and ``GEMINI_MODEL`` names.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_ASSISTANT_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # --- Model ---

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
        validation_alias=AliasChoices(
            "CONTENT_ASSISTANT_API_KEY", "GEMINI_API_KEY"
        ),
        repr=False,
    )
    model: str = Field(
        default=constants.DEFAULT_MODEL,
        description="Gemini model identifier",
        min_length=1,
        validation_alias=AliasChoices(
            "CONTENT_ASSISTANT_MODEL", "GEMINI_MODEL"
        ),
    )
    use_real_api: bool = Field(
        default=False,
        description="Call the real model instead of the offline mock adapter",
    )
    safety_threshold: str = Field(
        default=constants.DEFAULT_SAFETY_THRESHOLD,
        description="Block threshold applied to every safety category",
    )
    default_temperature: float = Field(
        default=constants.DEFAULT_TEMPERATURE,
        ge=constants.MIN_TEMPERATURE,
        le=constants.MAX_TEMPERATURE,
    )
    default_max_output_tokens: int = Field(
        default=constants.DEFAULT_MAX_OUTPUT_TOKENS, ge=1
    )
    instruction_template: str | None = Field(
        default=None,
        description="Replaces the built-in analysis instruction when set",
    )

    # --- Timeouts (seconds) ---

    fetch_timeout_s: float = Field(default=constants.FETCH_TIMEOUT, gt=0)
    render_timeout_s: float = Field(default=constants.RENDER_TIMEOUT, gt=0)
    parse_timeout_s: float = Field(default=constants.PARSE_TIMEOUT, gt=0)
    chunk_timeout_s: float = Field(default=constants.CHUNK_TIMEOUT, gt=0)
    history_timeout_s: float = Field(default=constants.HISTORY_TIMEOUT, gt=0)

    # --- Scraping ---

    min_content_chars: int = Field(default=constants.MIN_CONTENT_CHARS, ge=0)
    max_url_chars: int = Field(default=constants.MAX_URL_CHARS, ge=1)

    # --- History ---

    history_path: str | None = Field(
        default=None,
        description="JSON file for durable history; in-memory when unset",
    )
    history_limit: int = Field(default=constants.DEFAULT_HISTORY_LIMIT, ge=1)

    # --- HTTP surface ---

    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # --- Validation Rules ---

    @field_validator("safety_threshold", mode="before")
    @classmethod
    def parse_threshold(cls, v: Any) -> str:
        """Accept threshold names case-insensitively."""
        if isinstance(v, str) and v.strip().upper() in constants.SAFETY_THRESHOLDS:
            return v.strip().upper()
        raise ValueError(
            f"Invalid safety threshold: {v}. Must be one of: "
            + ", ".join(constants.SAFETY_THRESHOLDS)
        )

    @model_validator(mode="after")
    def validate_api_key_requirement(self) -> "AssistantSettings":
        """Ensure api_key is provided when use_real_api is True."""
        if self.use_real_api and not self.api_key:
            raise ValueError(
                "api_key is required when use_real_api=True. "
                "Set GEMINI_API_KEY or CONTENT_ASSISTANT_API_KEY, "
                "or pass it programmatically."
            )
        return self

    @property
    def cors_origin_list(self) -> list[str]:
        """Parsed CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary with the API key redacted, for diagnostics."""
        data = self.model_dump()
        if data.get("api_key"):
            data["api_key"] = "<redacted>"
        return data
