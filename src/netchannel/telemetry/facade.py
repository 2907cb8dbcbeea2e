"""
Facades over OpenTelemetry tracing and structlog logging.

Without a configured TracerProvider the OpenTelemetry API hands out
non-recording spans, so the facades are always safe to call. Until structlog
is configured, log events go to stderr in a plain console format.
"""

import sys
from typing import Any, ContextManager, Dict, Optional

import structlog
from opentelemetry import trace
from opentelemetry.trace.status import Status, StatusCode


class TracingFacade:
    """Tracer bound to a component name."""

    def __init__(self, name: str):
        """
        Initialize a new tracing facade.

        Args:
            name: The name of the tracer
        """
        self.name = name
        self.tracer = trace.get_tracer(name)

    def start_span(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> Any:
        """
        Start a new span without making it current.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span

        Returns:
            The new span
        """
        return self.tracer.start_span(name, attributes=attributes)

    def start_as_current_span(
        self, name: str, attributes: Optional[Dict[str, Any]] = None
    ) -> ContextManager:
        """
        Start a new span and make it the current span.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span

        Returns:
            A context manager yielding the span
        """
        return self.tracer.start_as_current_span(name, attributes=attributes)


def _stderr_logger(name: str) -> Any:
    """Logger for use before ``configure_telemetry``.

    structlog's unconfigured default prints to stdout, which would mix
    diagnostics into program output.
    """
    return structlog.wrap_logger(
        structlog.PrintLogger(sys.stderr),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.BoundLogger,
        logger_name=name,
    )


class LoggingFacade:
    """Structured logger that carries the current trace context."""

    def __init__(self, name: str):
        """
        Initialize a new logging facade.

        Args:
            name: The name of the logger
        """
        self.name = name
        if structlog.is_configured():
            self.logger = structlog.get_logger(name)
        else:
            self.logger = _stderr_logger(name)

    def _add_trace_context(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        span = trace.get_current_span()
        context = span.get_span_context()
        if context.is_valid:
            kwargs["trace_id"] = format(context.trace_id, "032x")
            kwargs["span_id"] = format(context.span_id, "016x")
        return kwargs

    def _mark_span_error(self, event: str) -> None:
        span = trace.get_current_span()
        if span.get_span_context().is_valid:
            span.set_status(Status(StatusCode.ERROR, event))

    def debug(self, event: str, **kwargs: Any) -> None:
        self.logger.debug(event, **self._add_trace_context(kwargs))

    def info(self, event: str, **kwargs: Any) -> None:
        self.logger.info(event, **self._add_trace_context(kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(event, **self._add_trace_context(kwargs))

    def error(self, event: str, **kwargs: Any) -> None:
        """Log an error and mark the current span as failed."""
        self._mark_span_error(event)
        self.logger.error(event, **self._add_trace_context(kwargs))

    def critical(self, event: str, **kwargs: Any) -> None:
        """Log a critical error and mark the current span as failed."""
        self._mark_span_error(event)
        self.logger.critical(event, **self._add_trace_context(kwargs))
