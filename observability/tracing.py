"""Optional tracing with Logfire/OpenTelemetry.

When enabled, Logfire instruments aiohttp client requests so each Reader
API call shows up as a span, and trace_operation wraps pipeline stages.
When disabled (the default) or Logfire is not installed, trace_operation
only records the stage duration in the debug log.

Requirements:
    pip install "reader-triage[tracing]"

Enable via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator

logger = logging.getLogger(__name__)


@dataclass
class TracingState:
    """Whether Logfire spans are being emitted."""

    enabled: bool = False
    service_name: str = "reader-triage"


_state = TracingState()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "reader-triage",
    token: str = "",
) -> TracingState:
    """Configure Logfire and instrument aiohttp.

    Tracing problems never stop the tool; they are logged and tracing is
    left disabled.

    Returns:
        The module's TracingState
    """
    _state.enabled = False
    _state.service_name = service_name
    if not enabled:
        logger.debug("Tracing disabled")
        return _state

    try:
        import logfire

        logfire.configure(service_name=service_name, token=token or None)
        logfire.instrument_aiohttp_client()
        _state.enabled = True
        logger.info("Logfire tracing enabled | service=%s", service_name)
    except ImportError:
        logger.warning("Logfire not installed. Tracing disabled.")
    except Exception as e:
        logger.error("Failed to configure Logfire: %s", e)

    return _state


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Span around a pipeline stage.

    Yields a dict; anything put into it is attached to the span when the
    stage finishes.
    """
    result_attrs: dict[str, Any] = {}
    start = time.monotonic()
    try:
        if _state.enabled:
            import logfire

            with logfire.span(name, **(attributes or {})) as span:
                yield result_attrs
                for key, value in result_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield result_attrs
    finally:
        logger.debug("Stage '%s' finished in %.2fs", name, time.monotonic() - start)
