"""Observability for the reader triage tool.

setup_logging:
    Console + rotating file logging, text or JSON, with run context.

set_run_context / clear_context:
    Tag log records with the current run id and CLI command.

setup_tracing / trace_operation:
    Optional Logfire spans around pipeline stages and Reader API calls.

Example:
    >>> from observability import setup_logging, trace_operation
    >>> setup_logging(config)
    >>> with trace_operation("fetch_newsletters"):
    ...     pass
"""

from observability.logging import clear_context, set_run_context, setup_logging
from observability.tracing import setup_tracing, trace_operation, TracingState

__all__ = [
    "setup_logging",
    "set_run_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingState",
]
