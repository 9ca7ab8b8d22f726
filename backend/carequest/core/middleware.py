"""Custom FastAPI middleware."""
from __future__ import annotations

import re
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from carequest.core.context import request_id_ctx_var, session_id_ctx_var

_SESSION_PATH = re.compile(r"^/sessions/([0-9a-fA-F-]{36})(?:/|$)")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Populate request.state.request_id and bind the caregiver session for logging."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        match = _SESSION_PATH.match(request.url.path)
        request_token = request_id_ctx_var.set(request_id)
        session_token = session_id_ctx_var.set(match.group(1) if match else None)

        try:
            response = await call_next(request)
        finally:
            session_id_ctx_var.reset(session_token)
            request_id_ctx_var.reset(request_token)

        response.headers["X-Request-Id"] = request_id
        return response
