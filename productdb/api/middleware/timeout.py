"""Per-request deadline middleware."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from productdb.core.exceptions import OperationCancelledError

logger = logging.getLogger("productdb.api")


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Cancel requests that overrun `timeout_seconds`.

    Cancellation propagates into whatever storage call the handler is awaiting;
    writes that already completed are not rolled back.
    """

    def __init__(self, app, *, timeout_seconds: float) -> None:
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            error = OperationCancelledError("Request cancelled after exceeding its deadline")
            logger.warning(
                "request.cancelled",
                extra={"path": request.url.path, "method": request.method, "timeout": self.timeout_seconds},
            )
            return JSONResponse(status_code=error.status_code, content={"detail": error.message, "code": error.code})
