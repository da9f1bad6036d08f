"""
Coffee Catalog Backend: Request Timeout Middleware
====================================================

What:  Answers 408 when a request runs longer than REQUEST_TIMEOUT_SECONDS.
How:   Wraps the downstream call in asyncio.wait_for. On expiry the handler
       is cancelled; an open request session is then rolled back by
       get_db_session's error path.

The response body is written here (middleware errors bypass FastAPI's
exception handlers) but uses the same shape as every other error.
"""

import asyncio
import logging
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from catalog.config import settings
from catalog.exceptions import RequestTimeoutError
from catalog.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        timeout = settings.request_timeout_seconds
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout)
        except asyncio.TimeoutError:
            exc = RequestTimeoutError(timeout=timeout)
            rid = request_id_var.get("")
            logger.warning(
                "[%s] %s %s timed out after %.1fs",
                rid,
                request.method,
                request.url.path,
                timeout,
            )
            return JSONResponse(
                status_code=408,
                content={
                    "error": "request_timeout",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": rid,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
