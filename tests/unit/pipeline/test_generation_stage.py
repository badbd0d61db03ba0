"""Tests for the generation stage's ordering, deadlines and cleanup."""

import pytest

from content_assistant.core.types import GenerationParams, TextPart
from content_assistant.exceptions import GenerationFailureError
from content_assistant.pipeline import GenerationClient
from tests.adapters import ScriptedAdapter
from tests.helpers import collect

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]

PARTS = (TextPart(text="instruction"), TextPart(text="content"))


async def test_fragments_arrive_in_provider_order():
    adapter = ScriptedAdapter(["a", "b", "c"])
    client = GenerationClient(adapter, model_name="gemini-test")

    assert await collect(client.stream(PARTS, GenerationParams())) == ["a", "b", "c"]
    (call,) = adapter.calls
    assert call.model_name == "gemini-test"
    assert call.parts == PARTS
    assert adapter.closed == 1


async def test_params_and_safety_threshold_reach_the_adapter():
    adapter = ScriptedAdapter(["x"])
    client = GenerationClient(adapter, safety_threshold="BLOCK_ONLY_HIGH")
    params = GenerationParams(temperature=0.0, max_output_tokens=16)

    await collect(client.stream(PARTS, params))

    assert adapter.calls[0].params == params
    assert adapter.calls[0].safety_threshold == "BLOCK_ONLY_HIGH"


async def test_stream_is_lazy():
    adapter = ScriptedAdapter(["x"])
    client = GenerationClient(adapter)

    stream = client.stream(PARTS, GenerationParams())
    assert adapter.calls == []
    await stream.aclose()


async def test_stalled_provider_hits_chunk_timeout():
    adapter = ScriptedAdapter(["a", "b"], delay=1.0)
    client = GenerationClient(adapter, chunk_timeout_s=0.05)

    with pytest.raises(GenerationFailureError, match="did not respond"):
        await collect(client.stream(PARTS, GenerationParams()))
    assert adapter.closed == 1


async def test_assistant_errors_pass_through_unchanged():
    error = GenerationFailureError("quota exceeded")
    adapter = ScriptedAdapter(["a"], fail_after=1, error=error)
    client = GenerationClient(adapter)

    received: list[str] = []
    with pytest.raises(GenerationFailureError) as exc_info:
        async for text in client.stream(PARTS, GenerationParams()):
            received.append(text)

    assert received == ["a"]
    assert exc_info.value is error


async def test_unexpected_errors_are_wrapped():
    adapter = ScriptedAdapter(["a"], fail_after=0, error=ConnectionResetError("reset"))
    client = GenerationClient(adapter)

    with pytest.raises(GenerationFailureError, match="reset"):
        await collect(client.stream(PARTS, GenerationParams()))


async def test_closing_early_closes_provider_stream():
    adapter = ScriptedAdapter(["a", "b", "c"])
    client = GenerationClient(adapter)

    stream = client.stream(PARTS, GenerationParams())
    assert await anext(stream) == "a"
    await stream.aclose()

    assert adapter.closed == 1
