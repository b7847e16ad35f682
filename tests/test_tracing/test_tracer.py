"""Tests for Tracer construction, span creation and reporting."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from spanwire.tracing.config import TracerConfig
from spanwire.tracing.context import SpanContext
from spanwire.tracing.references import Reference, child_of, follows_from
from spanwire.tracing.tracer import Tracer
from spanwire.tracing.types import (
    ConfigurationError,
    ReferenceType,
    SpanReport,
    TracerProtocol,
    ValidationError,
)


def _tracer(**overrides: Any) -> Tracer:
    options: dict[str, Any] = {
        "access_token": "test",
        "component_name": "test",
        "record_callback": lambda report: None,
    }
    options.update(overrides)
    return Tracer(**options)


class TestTracerConfiguration:
    """Test constructor validation."""

    def test_options_are_set(self) -> None:
        """Test accessToken, componentName and recordCallback are stored."""
        callback = MagicMock()
        tracer = Tracer(
            access_token="testAccessToken",
            component_name="testComponentname",
            record_callback=callback,
        )

        assert tracer.access_token == "testAccessToken"
        assert tracer.component_name == "testComponentname"
        assert tracer.record_callback is callback

    def test_record_callback_is_optional(self) -> None:
        """Test a tracer without callback still records reports silently."""
        tracer = Tracer(access_token="a", component_name="b")
        span = tracer.start_span("op")
        span.finish()

        assert tracer.record_callback is None
        assert tracer.spans == [span]

    @pytest.mark.parametrize(
        ("options", "message"),
        [
            ({"component_name": "help"}, "access_token is required for the tracer"),
            ({"access_token": 234, "component_name": "im"}, "access_token must be a string"),
            (
                {"access_token": "trapped"},
                "component_name is required to identify where traces come from",
            ),
            ({"access_token": "in", "component_name": 23423}, "component_name must be a string"),
            (
                {"access_token": "a", "component_name": "testing", "record_callback": "factory"},
                "record_callback must be callable",
            ),
        ],
    )
    def test_invalid_options_raise(self, options: dict[str, Any], message: str) -> None:
        """Test each invalid constructor option fails fast with a clear message."""
        with pytest.raises(ConfigurationError) as exc_info:
            Tracer(**options)
        assert str(exc_info.value) == message

    def test_config_rejects_unknown_options(self) -> None:
        """Test TracerConfig.build forbids unknown keys."""
        with pytest.raises(ConfigurationError, match="opentracing_module"):
            TracerConfig.build(access_token="a", component_name="b", opentracing_module=object())

    def test_from_config(self) -> None:
        """Test construction from a prevalidated config."""
        config = TracerConfig.build(access_token="a", component_name="svc")
        tracer = Tracer.from_config(config)

        assert tracer.config is config
        assert tracer.component_name == "svc"
        assert tracer.start_span("op").context.is_root

    def test_tracer_satisfies_protocol(self) -> None:
        """Test Tracer can be used where TracerProtocol is expected."""
        protocol_user: TracerProtocol = _tracer()
        assert callable(protocol_user.start_span)
        assert callable(protocol_user.inject)
        assert callable(protocol_user.extract)

    def test_is_sampled_defaults_true(self) -> None:
        """Test the default sampling policy."""
        assert _tracer().is_sampled() is True


class TestReferenceResolution:
    """Test parent resolution in start_span."""

    def test_root_span(self) -> None:
        """Test a span without references starts a new trace."""
        tracer = _tracer()
        span = tracer.start_span("op")
        ctx = span.context

        assert ctx.reference_type is ReferenceType.ROOT
        assert ctx.span_id == ctx.parent_id == ctx.trace_id

    @pytest.mark.parametrize("use_context", [False, True])
    def test_child_of(self, use_context: bool) -> None:
        """Test childOf with a Span or a SpanContext."""
        tracer = _tracer()
        parent = tracer.start_span("test1")
        span = tracer.start_span("test2", child_of=parent.context if use_context else parent)

        assert span.context.trace_id == parent.context.trace_id
        assert span.context.parent_id == parent.context.span_id
        assert span.context.span_id != parent.context.span_id
        assert parent.context.reference_type is ReferenceType.ROOT
        assert span.context.reference_type is ReferenceType.CHILD_OF

    @pytest.mark.parametrize("use_context", [False, True])
    def test_follows_from(self, use_context: bool) -> None:
        """Test followsFrom with a Span or a SpanContext."""
        tracer = _tracer()
        parent = tracer.start_span("test1")
        parent.finish()
        span = tracer.start_span("test2", follows_from=parent.context if use_context else parent)

        assert span.context.trace_id == parent.context.trace_id
        assert span.context.parent_id == parent.context.span_id
        assert span.context.reference_type is ReferenceType.FOLLOWS_FROM

    def test_chain_shares_trace(self) -> None:
        """Test a chain of childOf spans shares one trace and links pairwise."""
        tracer = _tracer()
        chain = [tracer.start_span("op0")]
        for i in range(1, 25):
            chain.append(tracer.start_span(f"op{i}", child_of=chain[-1]))

        assert len({s.context.trace_id for s in chain}) == 1
        for previous, current in zip(chain, chain[1:]):
            assert current.context.parent_id == previous.context.span_id

    def test_grandparent_parent_follows_from(self) -> None:
        """Test mixed childOf and followsFrom links across three generations."""
        tracer = _tracer()
        grandparent = tracer.start_span("test3")
        parent = tracer.start_span("test3", child_of=grandparent)
        child = tracer.start_span("followsFrom", follows_from=parent)

        assert parent.context.reference_type is ReferenceType.CHILD_OF
        assert parent.context.parent_id == grandparent.context.span_id
        assert child.context.reference_type is ReferenceType.FOLLOWS_FROM
        assert child.context.parent_id == parent.context.span_id
        assert child.context.trace_id == grandparent.context.trace_id

    def test_first_valid_reference_wins(self) -> None:
        """Test resolution picks the first usable reference in order."""
        tracer = _tracer()
        first = tracer.start_span("first")
        second = tracer.start_span("second")

        span = tracer.start_span(
            "op", references=[follows_from(first), child_of(second)]
        )

        assert span.context.parent_id == first.context.span_id
        assert span.context.reference_type is ReferenceType.FOLLOWS_FROM

    def test_shorthands_follow_explicit_references(self) -> None:
        """Test child_of/follows_from shorthands are appended after references."""
        tracer = _tracer()
        explicit = tracer.start_span("explicit")
        shorthand = tracer.start_span("shorthand")

        span = tracer.start_span("op", references=[child_of(explicit)], follows_from=shorthand)

        assert span.context.parent_id == explicit.context.span_id

    def test_invalid_reference_is_skipped_and_recorded(self) -> None:
        """Test an invalid referenced context is skipped with a diagnostic."""
        tracer = _tracer()
        parent = tracer.start_span("parent")

        span = tracer.start_span("op", references=[child_of("not-a-span"), follows_from(parent)])

        assert span.context.parent_id == parent.context.span_id
        assert span.context.reference_type is ReferenceType.FOLLOWS_FROM
        event = tracer.internal_events[0]
        assert event.message == "Span reference has an invalid context"
        assert event.payload == "not-a-span"

    def test_only_invalid_references_yield_root(self) -> None:
        """Test span creation never aborts on bad references."""
        tracer = _tracer()
        span = tracer.start_span("op", references=[child_of(None), follows_from(123)])

        assert span.context.reference_type is ReferenceType.ROOT
        assert len(tracer.internal_events) == 2

    def test_unsupported_reference_kind_is_skipped(self) -> None:
        """Test a reference with a non-linking kind is ignored."""
        tracer = _tracer()
        parent = tracer.start_span("parent")

        span = tracer.start_span("op", references=[Reference(kind="sibling", referenced=parent)])

        assert span.context.reference_type is ReferenceType.ROOT
        assert tracer.internal_events[0].message == "Unsupported reference type: sibling"

    def test_snake_case_reference_kind(self) -> None:
        """Test string kinds are normalized."""
        tracer = _tracer()
        parent = tracer.start_span("parent")

        span = tracer.start_span("op", references=[Reference(kind="child_of", referenced=parent)])

        assert span.context.reference_type is ReferenceType.CHILD_OF


class TestStartSpanValidation:
    """Test start_span argument validation."""

    def test_start_time_is_kept(self) -> None:
        """Test a supplied start time is used verbatim."""
        tracer = _tracer()
        start = 1_700_000_000_000 - 5000
        span = tracer.start_span("test2", start_time=start)

        assert span.start_time == start

    def test_zero_start_time_is_kept(self) -> None:
        """Test 0 is a valid timestamp rather than a missing one."""
        assert _tracer().start_span("op", start_time=0).start_time == 0

    @pytest.mark.parametrize("start_time", ["now", True, [1]])
    def test_non_numeric_start_time_raises(self, start_time: Any) -> None:
        """Test the startTime validation message."""
        tracer = _tracer()

        with pytest.raises(ValidationError) as exc_info:
            tracer.start_span("test2", start_time=start_time)
        assert str(exc_info.value) == "startTime must be a timestamp of type number"
        assert tracer.spans == []

    def test_tags_on_creation(self) -> None:
        """Test tags supplied at creation are stored."""
        tags = {"tag_a": 1, "tag_b": "b", "tag_c": True}
        span = _tracer().start_span("test", tags=tags)

        assert span.tags == tags

    @pytest.mark.parametrize("tags", ["tags", [], ("a", 1), 5])
    def test_non_mapping_tags_raise(self, tags: Any) -> None:
        """Test the tags validation message."""
        with pytest.raises(ValidationError) as exc_info:
            _tracer().start_span("test", tags=tags)
        assert str(exc_info.value) == "tags must be an object"

    def test_supplied_tags_are_copied(self) -> None:
        """Test later mutation of the caller's dict does not leak into the span."""
        tags = {"a": 1}
        span = _tracer().start_span("test", tags=tags)
        tags["a"] = 2

        assert span.tags == {"a": 1}


class TestSpanBuffer:
    """Test the spans buffer and clear()."""

    def test_spans_are_buffered_in_order(self) -> None:
        """Test every started span is appended."""
        tracer = _tracer()
        spans = [tracer.start_span(f"op{i}") for i in range(5)]

        assert tracer.spans == spans

    def test_clear(self) -> None:
        """Test clear() empties the buffer regardless of size."""
        tracer = _tracer()
        for _ in range(100):
            tracer.start_span("microspan").finish()

        assert len(tracer.spans) == 100
        tracer.clear()
        assert len(tracer.spans) == 0

    def test_clear_keeps_diagnostics(self) -> None:
        """Test clear() only resets spans."""
        tracer = _tracer()
        tracer.inject(tracer.start_span("op"), "binary", {})
        tracer.clear()

        assert len(tracer.internal_events) == 1


class TestReporting:
    """Test the reporting pipeline."""

    def test_single_span_report(self) -> None:
        """Test the report assembled for a finished span."""
        callback = MagicMock()
        tracer = Tracer(
            access_token="testAccessToken",
            component_name="indexSpec/singleSpan",
            record_callback=callback,
        )

        span = tracer.start_span("test1", start_time=100, tags={"k": "v"})
        span.log_event("receivedInput", {"x": 2, "y": 3})
        span.finish(160)

        callback.assert_called_once()
        report: SpanReport = callback.call_args.args[0]
        ctx = span.context
        assert report["component"] == "indexSpec/singleSpan"
        assert report["operation_name"] == "test1"
        assert report["start_time"] == 100
        assert report["finish_time"] == 160
        assert report["duration"] == 60
        assert report["duration"] == span.duration_ms()
        assert report["tags"] == {"k": "v"}
        assert report["logs"][0]["event"] == "receivedInput"
        assert report["trace_id"] == ctx.trace_id
        assert report["span_id"] == ctx.span_id
        assert report["parent_id"] == ctx.parent_id
        assert report["baggage"] == {}
        assert report["reference_type"] == "root"

    def test_report_is_a_snapshot(self) -> None:
        """Test post-finish mutation does not change a delivered report."""
        reports: list[SpanReport] = []
        tracer = _tracer(record_callback=reports.append)
        span = tracer.start_span("op")
        span.finish()
        span.set_tag("late", True)

        assert "late" not in reports[0]["tags"]

    def test_parent_and_child_each_report(self) -> None:
        """Test each finished span reports once."""
        callback = MagicMock()
        tracer = _tracer(record_callback=callback)
        parent = tracer.start_span("test2")
        child = tracer.start_span("childOf2", child_of=parent)
        child.finish()
        parent.finish()

        assert callback.call_count == 2

    def test_record_returns_report_without_callback(self) -> None:
        """Test record() still assembles a report when no sink is configured."""
        tracer = Tracer(access_token="a", component_name="b")
        span = tracer.start_span("op")
        span.finish()

        report = tracer.record(span)
        assert report["span_id"] == span.context.span_id

    def test_callback_errors_propagate(self) -> None:
        """Test a failing callback surfaces to the finishing caller."""

        def failing_callback(report: SpanReport) -> None:
            raise RuntimeError("sink down")

        tracer = _tracer(record_callback=failing_callback)
        span = tracer.start_span("op")

        with pytest.raises(RuntimeError, match="sink down"):
            span.finish()
        assert span.is_finished

    def test_large_number_of_spans(self) -> None:
        """Test 10,000 spans produce 10,000 reports with distinct span ids."""
        reports: list[SpanReport] = []
        tracer = _tracer(record_callback=reports.append)

        for _ in range(10_000):
            tracer.start_span("microspan").finish()

        assert len(reports) == 10_000
        assert len({report["span_id"] for report in reports}) == 10_000


class TestFromSettings:
    """Test construction from environment settings."""

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test token and component name are read from SPANWIRE_* variables."""
        from spanwire.config.settings import SpanwireSettings

        monkeypatch.setenv("SPANWIRE_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("SPANWIRE_COMPONENT_NAME", "env-service")

        tracer = Tracer.from_settings(SpanwireSettings())

        assert tracer.access_token == "env-token"
        assert tracer.component_name == "env-service"

    def test_from_settings_requires_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test missing settings fail as configuration errors."""
        from spanwire.config.settings import SpanwireSettings

        monkeypatch.delenv("SPANWIRE_ACCESS_TOKEN", raising=False)
        monkeypatch.setenv("SPANWIRE_COMPONENT_NAME", "env-service")

        with pytest.raises(ConfigurationError, match="access_token is required"):
            Tracer.from_settings(SpanwireSettings())


def test_scenario_root_then_child() -> None:
    """Test the basic root/child scenario end to end."""
    tracer = _tracer()
    a = tracer.start_span("op")
    b = tracer.start_span("op2", child_of=a)

    assert a.context.reference_type.value == "root"
    assert b.context.trace_id == a.context.trace_id
    assert b.context.parent_id == a.context.span_id
    assert isinstance(b.context, SpanContext)
