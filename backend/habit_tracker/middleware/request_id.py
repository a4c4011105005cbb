"""
Habit Tracker Backend - Request ID Middleware
===============================================

What:  Tags each request with a short correlation ID.
How:   Takes the client's X-Request-ID header or generates one, stores it in
       a ContextVar for loggers and error handlers, and echoes it back in
       the response header.
When:  Outermost middleware, before the access log runs.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns an ID to each request.

    A client-supplied X-Request-ID is kept as-is; otherwise the first 8
    characters of a UUID4 are used. The ID is also put on request.state
    for handlers that prefer it there.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
