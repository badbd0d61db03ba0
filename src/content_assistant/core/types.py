"""Core data types that flow through the pipeline.

This module defines the immutable data structures that represent a request as
it moves from the inbound envelope, through extraction and prompt assembly, to
the events relayed back to the client. Each stage produces a new value rather
than mutating the previous one.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import math
import re
import typing
from urllib.parse import urlsplit

from content_assistant.constants import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
)
from content_assistant.exceptions import (
    ConflictingInputError,
    InvalidInputError,
    NoInputProvidedError,
)

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _is_present(value: object) -> bool:
    """Treat None, empty and whitespace-only strings as absent fields."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, typing.Mapping):
        return len(value) > 0
    return True


# --- Result type for stage boundaries ---
# Stages return Success or Failure instead of raising, so the relay decides
# in one place how an error reaches the client.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result in the pipeline."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failure in the pipeline, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]


# --- Generation parameters ---


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationParams:
    """Sampling settings forwarded to the model."""

    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS

    def __post_init__(self) -> None:
        """Validate GenerationParams invariants."""
        _require(
            condition=MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE,
            message=f"must be within [{MIN_TEMPERATURE}, {MAX_TEMPERATURE}]",
            field_name="temperature",
        )
        _require(
            condition=isinstance(self.max_output_tokens, int)
            and self.max_output_tokens > 0,
            message="must be a positive int",
            field_name="max_output_tokens",
        )

    @classmethod
    def coerce(
        cls,
        temperature: object = None,
        max_output_tokens: object = None,
        *,
        default_temperature: float = DEFAULT_TEMPERATURE,
        default_max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> GenerationParams:
        """Build params from loosely typed client values.

        Absent, non-numeric or out-of-range values fall back to the defaults
        instead of failing the request.
        """
        return cls(
            temperature=_coerce_temperature(temperature, default_temperature),
            max_output_tokens=_coerce_max_tokens(
                max_output_tokens, default_max_output_tokens
            ),
        )


def _coerce_temperature(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if math.isnan(parsed) or not MIN_TEMPERATURE <= parsed <= MAX_TEMPERATURE:
        return default
    return parsed


def _coerce_max_tokens(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if not math.isfinite(parsed) or parsed < 1:
        return default
    return int(parsed)


# --- Input sources (tagged union) ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextInput:
    """Raw text pasted by the user."""

    text: str

    def __post_init__(self) -> None:
        """Validate TextInput invariants."""
        _require(
            condition=isinstance(self.text, str) and self.text.strip() != "",
            message="must be a non-empty str",
            field_name="text",
            exc=InvalidInputError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class UrlInput:
    """A remote page to scrape."""

    url: str

    def __post_init__(self) -> None:
        """Validate UrlInput invariants."""
        parts = urlsplit(self.url) if isinstance(self.url, str) else None
        _require(
            condition=parts is not None
            and parts.scheme in ("http", "https")
            and bool(parts.netloc),
            message=f"must be an absolute http(s) URL, got {self.url!r}",
            field_name="url",
            exc=InvalidInputError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ImageInput:
    """An image passed to the model as-is, with optional accompanying text."""

    mime_type: str
    data: bytes
    prompt: str | None = None

    def __post_init__(self) -> None:
        """Validate ImageInput invariants."""
        _require(
            condition=isinstance(self.mime_type, str)
            and self.mime_type.startswith("image/"),
            message=f"must be an image/* type, got {self.mime_type!r}",
            field_name="mime_type",
            exc=InvalidInputError,
        )
        _require(
            condition=isinstance(self.data, bytes) and len(self.data) > 0,
            message="must be non-empty bytes",
            field_name="data",
            exc=InvalidInputError,
        )
        _require(
            condition=self.prompt is None or isinstance(self.prompt, str),
            message="must be a str when sent with an image",
            field_name="text",
            exc=InvalidInputError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentInput:
    """An uploaded document whose text is extracted before generation."""

    name: str
    mime_type: str
    data: bytes

    def __post_init__(self) -> None:
        """Validate DocumentInput invariants."""
        _require(
            condition=isinstance(self.mime_type, str) and self.mime_type != "",
            message="must be a non-empty str",
            field_name="mime_type",
            exc=InvalidInputError,
        )
        _require(
            condition=isinstance(self.data, bytes) and len(self.data) > 0,
            message="must be non-empty bytes",
            field_name="data",
            exc=InvalidInputError,
        )


type InputSource = TextInput | UrlInput | ImageInput | DocumentInput

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?,(?P<data>.*)$", re.S)


def decode_base64(payload: str, *, field_name: str) -> bytes:
    """Decode a base64 payload, tolerating a leading data URL prefix."""
    _require(
        condition=isinstance(payload, str),
        message="must be a base64 str",
        field_name=field_name,
        exc=InvalidInputError,
    )
    match = _DATA_URL.match(payload)
    encoded = match.group("data") if match else payload
    try:
        return base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"{field_name}: invalid base64 payload") from e


def split_data_url(value: str) -> tuple[str | None, str]:
    """Split ``data:<mime>;base64,<payload>`` into (mime, payload)."""
    match = _DATA_URL.match(value)
    if not match:
        return None, value
    return match.group("mime"), match.group("data")


@dataclasses.dataclass(frozen=True, slots=True)
class InputEnvelope:
    """Exactly one content source plus generation parameters."""

    source: InputSource
    params: GenerationParams = dataclasses.field(default_factory=GenerationParams)

    def __post_init__(self) -> None:
        """Validate InputEnvelope invariants."""
        _require(
            condition=isinstance(
                self.source, TextInput | UrlInput | ImageInput | DocumentInput
            ),
            message="must be one of TextInput, UrlInput, ImageInput, DocumentInput",
            field_name="source",
            exc=TypeError,
        )

    @property
    def kind(self) -> typing.Literal["text", "url", "image", "document"]:
        """Tag of the populated source."""
        match self.source:
            case TextInput():
                return "text"
            case UrlInput():
                return "url"
            case ImageInput():
                return "image"
            case DocumentInput():
                return "document"

    @classmethod
    def from_fields(
        cls,
        *,
        text: str | None = None,
        url: str | None = None,
        image: str | typing.Mapping[str, typing.Any] | None = None,
        document: typing.Mapping[str, typing.Any] | None = None,
        temperature: object = None,
        max_output_tokens: object = None,
        params: GenerationParams | None = None,
    ) -> InputEnvelope:
        """Build an envelope from the optional request fields.

        Text may accompany an image; any other combination of populated
        sources is rejected so that no scrape or model call is made for an
        ambiguous request. Loose ``temperature`` and ``max_output_tokens``
        values are coerced with `GenerationParams.coerce` unless explicit
        ``params`` are given.

        Raises:
            NoInputProvidedError: If no source is populated.
            ConflictingInputError: If more than one source is populated.
            InvalidInputError: If a populated source is malformed.
        """
        present = {
            name
            for name, value in (
                ("text", text),
                ("url", url),
                ("image", image),
                ("document", document),
            )
            if _is_present(value)
        }
        if not present:
            raise NoInputProvidedError()

        exclusive = present - {"text"} if "image" in present else present
        if len(exclusive) > 1:
            raise ConflictingInputError(
                "Provide exactly one of text, url, image or document; got "
                + ", ".join(sorted(present))
            )

        source: InputSource
        if "image" in present:
            source = _image_from_field(image, prompt=text if "text" in present else None)
        elif "document" in present:
            source = _document_from_field(document)
        elif "url" in present:
            source = UrlInput(url=url.strip() if isinstance(url, str) else url)
        else:
            source = TextInput(text=typing.cast("str", text))
        if params is None:
            params = GenerationParams.coerce(temperature, max_output_tokens)
        return cls(source=source, params=params)


def _image_from_field(value: object, *, prompt: str | None) -> ImageInput:
    if isinstance(value, str):
        mime, payload = split_data_url(value)
        if mime is None:
            raise InvalidInputError("image: expected a data URL with a mime type")
        return ImageInput(
            mime_type=mime,
            data=decode_base64(payload, field_name="image"),
            prompt=prompt,
        )
    if isinstance(value, typing.Mapping):
        mime = value.get("mimeType") or value.get("mime_type")
        payload = value.get("base64") or value.get("data")
        _require(
            condition=isinstance(mime, str) and isinstance(payload, str),
            message="expected mimeType and base64 fields",
            field_name="image",
            exc=InvalidInputError,
        )
        return ImageInput(
            mime_type=typing.cast("str", mime),
            data=decode_base64(typing.cast("str", payload), field_name="image"),
            prompt=prompt,
        )
    raise InvalidInputError("image: expected a data URL or {mimeType, base64}")


def _document_from_field(value: object) -> DocumentInput:
    _require(
        condition=isinstance(value, typing.Mapping),
        message="expected {name, mimeType, base64}",
        field_name="document",
        exc=InvalidInputError,
    )
    doc = typing.cast("typing.Mapping[str, typing.Any]", value)
    mime = doc.get("mimeType") or doc.get("mime_type")
    payload = doc.get("base64") or doc.get("data")
    _require(
        condition=isinstance(mime, str) and isinstance(payload, str),
        message="expected mimeType and base64 fields",
        field_name="document",
        exc=InvalidInputError,
    )
    return DocumentInput(
        name=str(doc.get("name") or "document"),
        mime_type=typing.cast("str", mime),
        data=decode_base64(typing.cast("str", payload), field_name="document"),
    )


# --- Model input parts ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextPart:
    """A text unit of model input."""

    text: str

    def __post_init__(self) -> None:
        """Validate TextPart invariants."""
        _require(
            condition=isinstance(self.text, str),
            message="text must be a str",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class BinaryPart:
    """An inline binary unit of model input (images)."""

    mime_type: str
    data: bytes

    def __post_init__(self) -> None:
        """Validate BinaryPart invariants."""
        _require(
            condition=isinstance(self.mime_type, str) and self.mime_type != "",
            message="mime_type must be a non-empty str",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.data, bytes),
            message="data must be bytes",
            exc=TypeError,
        )


type ContentPart = TextPart | BinaryPart


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractedContent:
    """Output of the extraction stage, ready for prompt assembly.

    ``descriptor`` is the short, human-readable description of the input that
    is stored alongside the analysis in history.
    """

    kind: typing.Literal["text", "url", "image", "document"]
    descriptor: str
    text: str | None = None
    binary: BinaryPart | None = None

    def __post_init__(self) -> None:
        """Validate ExtractedContent invariants."""
        _require(
            condition=self.text is not None or self.binary is not None,
            message="extracted content must carry text or binary data",
        )
        _require(
            condition=(self.binary is not None) == (self.kind == "image"),
            message="binary data is only valid for image inputs",
            field_name="binary",
        )


# --- Stream events ---


@dataclasses.dataclass(frozen=True, slots=True)
class ChunkEvent:
    """One incremental fragment of model output."""

    text: str
    type: typing.ClassVar[str] = "chunk"

    def to_frame(self) -> dict[str, typing.Any]:
        return {"type": self.type, "data": {"text": self.text}}


@dataclasses.dataclass(frozen=True, slots=True)
class FinalEvent:
    """Terminal marker: the accumulated chunks parsed into a valid analysis."""

    type: typing.ClassVar[str] = "final"

    def to_frame(self) -> dict[str, typing.Any]:
        return {"type": self.type, "data": {}}


@dataclasses.dataclass(frozen=True, slots=True)
class ErrorEvent:
    """Terminal failure with a human-readable message."""

    message: str
    code: str = "internal_error"
    type: typing.ClassVar[str] = "error"

    def to_frame(self) -> dict[str, typing.Any]:
        return {"type": self.type, "data": {"message": self.message}}


type StreamEvent = ChunkEvent | FinalEvent | ErrorEvent


def is_terminal(event: StreamEvent) -> bool:
    """Return True for the events that end a request."""
    return isinstance(event, FinalEvent | ErrorEvent)
