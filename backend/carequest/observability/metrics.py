"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from carequest.observability.tracing import trace

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short-lived Opik trace; no-op when tracing is off."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update({k: v for k, v in metadata.items() if v is not None})

    with trace(f"metric:{name}", metadata=payload, tags=["metric"]) as metric_trace:
        if metric_trace is None:
            logger.debug("metric %s=%s", name, value)
