"""Parse the accumulated model output into an `AnalysisResult`.

Only the complete buffer is ever parsed: chunk boundaries may split JSON
syntax anywhere, so partial parsing is never attempted.
"""

import json
import logging

from pydantic import ValidationError

from ..exceptions import ResultParseFailureError
from .types import AnalysisResult

log = logging.getLogger(__name__)


def parse_analysis(buffer: str) -> AnalysisResult:
    """Parse the full response text as one analysis object.

    Raises:
        ResultParseFailureError: If the text is not a JSON object or does not
            satisfy the analysis schema.
    """
    if not buffer.strip():
        raise ResultParseFailureError("The model returned an empty response.")
    try:
        payload = json.loads(buffer)
    except json.JSONDecodeError as e:
        log.debug("Unparseable model output (%d chars): %s", len(buffer), e)
        raise ResultParseFailureError(
            f"The model response was not valid JSON: {e.msg} "
            f"(line {e.lineno}, column {e.colno})."
        ) from e
    if not isinstance(payload, dict):
        raise ResultParseFailureError(
            f"The model response must be a JSON object, got {type(payload).__name__}."
        )
    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors()
        )
        raise ResultParseFailureError(
            f"The model response did not match the expected fields ({fields})."
        ) from e
