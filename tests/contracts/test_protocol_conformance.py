"""Structural conformance of the pluggable seams."""

import inspect

import pytest

from content_assistant import exceptions
from content_assistant.api.identity import (
    AnonymousResolver,
    IdentityResolver,
    StaticTokenResolver,
)
from content_assistant.extensions.history_store import (
    HistorySink,
    InMemoryHistorySink,
    JSONHistorySink,
)
from content_assistant.extraction.scraper import PageRenderer, PlaywrightRenderer
from content_assistant.pipeline.adapters import (
    GenerationAdapter,
    GoogleGenAIAdapter,
    MockAdapter,
)
from content_assistant.pipeline.base import BaseAsyncHandler
from content_assistant.pipeline.source_handler import SourceHandler
from content_assistant.telemetry import InMemoryReporter, TelemetryReporter
from tests.adapters import (
    CountingRenderer,
    FailingHistorySink,
    ScriptedAdapter,
    SlowHistorySink,
)

pytestmark = [pytest.mark.contract, pytest.mark.unit]


@pytest.mark.parametrize(
    "adapter", [MockAdapter(), ScriptedAdapter(), GoogleGenAIAdapter(client=object())]
)
def test_generation_adapters(adapter):
    assert isinstance(adapter, GenerationAdapter)
    assert inspect.isasyncgenfunction(type(adapter).stream)


@pytest.mark.parametrize(
    "sink",
    [InMemoryHistorySink(), JSONHistorySink("unused.json"), FailingHistorySink(), SlowHistorySink()],
)
def test_history_sinks(sink):
    assert isinstance(sink, HistorySink)


@pytest.mark.parametrize("renderer", [PlaywrightRenderer(), CountingRenderer()])
def test_page_renderers(renderer):
    assert isinstance(renderer, PageRenderer)


@pytest.mark.parametrize("resolver", [AnonymousResolver(), StaticTokenResolver({})])
def test_identity_resolvers(resolver):
    assert isinstance(resolver, IdentityResolver)


def test_source_handler_is_an_async_handler():
    expected = inspect.signature(BaseAsyncHandler.handle)
    actual = inspect.signature(SourceHandler.handle)
    assert list(actual.parameters) == list(expected.parameters)
    assert inspect.iscoroutinefunction(SourceHandler.handle)


def test_in_memory_reporter_is_a_reporter():
    assert isinstance(InMemoryReporter(), TelemetryReporter)


def test_error_codes_are_unique_and_stable():
    classes = [
        obj
        for obj in vars(exceptions).values()
        if inspect.isclass(obj) and issubclass(obj, exceptions.ContentAssistantError)
    ]
    codes = [cls.code for cls in classes]
    assert len(codes) == len(set(codes))
    assert {
        "no_input_provided",
        "conflicting_input",
        "invalid_input",
        "unsupported_document_type",
        "parse_timeout",
        "scrape_failure",
        "generation_failure",
        "result_parse_failure",
    } <= set(codes)
