"""Request ID middleware for scrape correlation."""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
import structlog

REQUEST_ID_HEADER = "X-Request-ID"

# Accept caller-supplied IDs only if they are short and printable
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add a request ID to every HTTP request.

    The ID is taken from the X-Request-ID header when it looks sane and is
    generated otherwise. It is echoed in the response and bound to the
    structlog context for the duration of the request, so producer failures
    logged during a collection pass can be tied to the scrape that ran them.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and add request ID."""
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not _REQUEST_ID_RE.match(request_id):
            request_id = str(uuid.uuid4())

        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method
        )

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
