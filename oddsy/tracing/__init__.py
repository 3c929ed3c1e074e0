"""
Langfuse tracing integration for Oddsy.

Provides observability for model calls, tool executions, and request lifecycle.
"""

from .client import (
    TracingClient,
    init_tracing_client,
    get_tracing_client,
    shutdown_tracing,
)
from .context import ObservationContext, TracingContext

__all__ = [
    "TracingClient",
    "init_tracing_client",
    "get_tracing_client",
    "shutdown_tracing",
    "ObservationContext",
    "TracingContext",
]
