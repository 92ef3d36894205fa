from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Give every request an id and log one line when it completes.

    A caller-supplied ``x-request-id`` is kept so a client can follow its
    moves and the engine replies through the logs.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
