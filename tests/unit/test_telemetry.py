import pytest

from content_assistant.telemetry import InMemoryReporter, TelemetryContext

pytestmark = pytest.mark.unit


def test_disabled_context_is_shared_no_op():
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)
    assert ctx is TelemetryContext()
    with ctx("scrape.fast"):
        ctx.count("scrape.escalated")
    assert reporter.timings == {}
    assert reporter.metrics == {}


def test_enabled_context_records_nested_scopes_and_counters(monkeypatch):
    monkeypatch.setenv("CONTENT_ASSISTANT_TELEMETRY", "1")
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)

    with ctx("extract"), ctx("scrape.slow"):
        ctx.count("scrape.escalated")

    assert set(reporter.timings) == {"extract", "extract.scrape.slow"}
    assert reporter.total("extract.scrape.slow.scrape.escalated") == 1
    assert "Telemetry Report" in reporter.get_report()


def test_failed_scope_is_flagged(monkeypatch):
    monkeypatch.setenv("CONTENT_ASSISTANT_TELEMETRY", "1")
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)

    with pytest.raises(RuntimeError), ctx("document.parse"):
        raise RuntimeError("boom")

    (_, metadata), = reporter.timings["document.parse"]
    assert metadata["failed"] is True


def test_reporter_errors_do_not_escape(monkeypatch, caplog):
    monkeypatch.setenv("CONTENT_ASSISTANT_TELEMETRY", "1")

    class Broken:
        def record_timing(self, *_a, **_k):
            raise ValueError("nope")

        def record_metric(self, *_a, **_k):
            raise ValueError("nope")

    ctx = TelemetryContext(Broken())
    with ctx("relay"):
        ctx.count("relay.error")
    assert "Telemetry reporter 'Broken' failed" in caplog.text
