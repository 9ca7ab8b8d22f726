"""Tracing utilities wrapping Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from carequest.core.context import get_request_id, get_session_id
from carequest.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Open an Opik trace around a block of work.

    The request and session ids bound by the middleware are attached
    automatically. Yields None when Opik is disabled.
    """
    client = get_opik_client()
    opik_trace: Optional["Trace"] = None

    if client:
        trace_metadata = dict(metadata or {})
        for key, value in (("request_id", get_request_id()), ("session_id", get_session_id())):
            if value:
                trace_metadata.setdefault(key, value)
        try:
            opik_trace = client.trace(name=name, metadata=trace_metadata or None, tags=tags)
        except Exception as exc:  # pragma: no cover - SDK failure
            logger.debug("Unable to start Opik trace %s: %s", name, exc)
            opik_trace = None

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace:
            try:
                opik_trace.update(error_info={"exception_type": type(exc).__name__, "message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        if opik_trace:
            try:
                opik_trace.end()
            except Exception:  # pragma: no cover
                logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)
