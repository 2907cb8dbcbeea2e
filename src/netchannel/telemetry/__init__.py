"""
Telemetry module for netchannel.

This module provides tracing and structured logging for channel operations.
It uses OpenTelemetry for tracing and structlog for logging.
"""

from netchannel.telemetry.config import configure_telemetry
from netchannel.telemetry.facade import LoggingFacade, TracingFacade


def get_telemetry(name: str) -> tuple:
    """
    Get tracer and logger instances for the given name.

    Args:
        name: The name to use for the tracer and logger

    Returns:
        A tuple containing a tracer and logger
    """
    return TracingFacade(name), LoggingFacade(name)


__all__ = [
    "LoggingFacade",
    "TracingFacade",
    "configure_telemetry",
    "get_telemetry",
]
