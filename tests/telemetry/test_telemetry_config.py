"""Tests for the telemetry configuration module."""

import os
from unittest.mock import MagicMock, patch

import pytest


def test_configure_telemetry_tracing_disabled():
    """With tracing disabled only structlog is configured."""
    from netchannel.telemetry.config import configure_telemetry

    with (
        patch("netchannel.telemetry.config.trace.set_tracer_provider") as mock_set_provider,
        patch("netchannel.telemetry.config._configure_structlog") as mock_structlog,
    ):
        assert configure_telemetry(trace_enabled=False, log_level="DEBUG") is False

        mock_set_provider.assert_not_called()
        mock_structlog.assert_called_once_with("DEBUG", None)


def test_configure_telemetry_tracing_enabled():
    from netchannel.telemetry.config import configure_telemetry

    mock_resource = MagicMock()
    with (
        patch("netchannel.telemetry.config.trace.set_tracer_provider") as mock_set_provider,
        patch("netchannel.telemetry.config._configure_structlog"),
        patch(
            "netchannel.telemetry.config.Resource.create", return_value=mock_resource
        ) as mock_create,
        patch("netchannel.telemetry.config.TracerProvider") as mock_provider_cls,
        patch("netchannel.telemetry.config._configure_exporters") as mock_exporters,
        patch.dict(os.environ, {"OTEL_RESOURCE_ATTRIBUTES": "env=test,team=net"}),
    ):
        assert configure_telemetry(
            service_name="svc", resource_attributes={"team": "core"}, trace_enabled=True
        ) is True

        mock_create.assert_called_once_with(
            {"env": "test", "team": "core", "service.name": "svc"}
        )
        mock_provider_cls.assert_called_once_with(resource=mock_resource)
        provider = mock_provider_cls.return_value
        mock_set_provider.assert_called_once_with(provider)
        mock_exporters.assert_called_once_with(provider, None)


def test_configure_telemetry_reads_env():
    """OTEL_SDK_DISABLED turns tracing off."""
    from netchannel.telemetry.config import configure_telemetry

    with (
        patch("netchannel.telemetry.config.trace.set_tracer_provider") as mock_set_provider,
        patch("netchannel.telemetry.config._configure_structlog"),
        patch.dict(os.environ, {"OTEL_SDK_DISABLED": "true"}),
    ):
        assert configure_telemetry() is False
        mock_set_provider.assert_not_called()


def test_configure_exporters():
    from netchannel.telemetry.config import _configure_exporters

    provider = MagicMock()
    with patch("netchannel.telemetry.config.BatchSpanProcessor") as mock_processor:
        _configure_exporters(provider, ["none"])
        provider.add_span_processor.assert_not_called()

        _configure_exporters(provider, ["console"])
        provider.add_span_processor.assert_called_once_with(mock_processor.return_value)

    with pytest.raises(ValueError):
        _configure_exporters(MagicMock(), ["zipkin"])


def test_configure_exporters_from_env():
    from netchannel.telemetry.config import _configure_exporters

    provider = MagicMock()
    with (
        patch.dict(os.environ, {"OTEL_TRACES_EXPORTER": "console, none"}),
        patch("netchannel.telemetry.config.BatchSpanProcessor"),
    ):
        _configure_exporters(provider)
    provider.add_span_processor.assert_called_once()


def test_configure_structlog():
    """Test _configure_structlog wires the JSON renderer last."""
    from netchannel.telemetry.config import _configure_structlog, add_trace_context

    custom_processor = MagicMock()
    with (
        patch("netchannel.telemetry.config.logging.basicConfig") as mock_basic_config,
        patch("netchannel.telemetry.config.structlog.configure") as mock_configure,
    ):
        _configure_structlog("debug", [custom_processor])

        mock_basic_config.assert_called_once()
        assert mock_basic_config.call_args.kwargs["level"] == 10

        processors = mock_configure.call_args.kwargs["processors"]
        assert add_trace_context in processors
        assert custom_processor in processors
        assert processors.index(custom_processor) == len(processors) - 2
        assert type(processors[-1]).__name__ == "JSONRenderer"


def test_add_trace_context():
    from netchannel.telemetry.config import add_trace_context

    # No active span: event passes through unchanged
    assert add_trace_context(None, "info", {"event": "x"}) == {"event": "x"}

    mock_span = MagicMock()
    mock_context = MagicMock(is_valid=True, trace_id=1, span_id=2)
    mock_span.get_span_context.return_value = mock_context
    with patch(
        "netchannel.telemetry.config.trace.get_current_span", return_value=mock_span
    ):
        event = add_trace_context(None, "info", {"event": "x"})
    assert event["trace_id"] == format(1, "032x")
    assert event["span_id"] == format(2, "016x")
