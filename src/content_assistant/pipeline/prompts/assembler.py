"""Prompt assembly.

Builds the ordered parts sent to the model: the instruction first, then the
extracted content. The instruction wording is configurable, but whatever text
is used must keep asking for the three JSON fields the result parser expects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from content_assistant.constants import NO_ACTION_ITEMS, NO_NEXT_STEPS
from content_assistant.core.types import ContentPart, TextPart

if TYPE_CHECKING:
    from content_assistant.core.types import ExtractedContent

DEFAULT_INSTRUCTION = f"""\
You are an AI assistant. Analyze the provided content and provide the \
following outputs in a single, valid JSON object.
Do NOT include any markdown formatting. The entire response must be a single \
JSON object.
1. "summary": A concise, 3-5 sentence summary.
2. "actionItems": An array of clear, actionable tasks. If none, return \
["{NO_ACTION_ITEMS}"].
3. "nextSteps": An array of suggested next steps. If none, return \
["{NO_NEXT_STEPS}"].
"""

DEFAULT_IMAGE_PROMPT = (
    "Describe this image and extract any actionable content, tasks or "
    "follow-ups it contains."
)


def assemble_parts(
    extracted: ExtractedContent,
    template: str | None = None,
) -> tuple[ContentPart, ...]:
    """Assemble the model input for one request.

    Args:
        extracted: Output of the extraction stage.
        template: Instruction text; `DEFAULT_INSTRUCTION` when omitted.

    Returns:
        The instruction part followed by the content parts. Images contribute
        their binary part and then the user's text, or `DEFAULT_IMAGE_PROMPT`
        when none was given.
    """
    instruction = TextPart(text=template or DEFAULT_INSTRUCTION)

    if extracted.binary is not None:
        accompanying = extracted.text if extracted.text else DEFAULT_IMAGE_PROMPT
        return (instruction, extracted.binary, TextPart(text=accompanying))

    return (instruction, TextPart(text=extracted.text or ""))
