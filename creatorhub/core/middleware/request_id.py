import logging
import re
import time
from typing import Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from creatorhub.core.logging import latency_bucket_ms, request_id_ctx_var

logger = logging.getLogger("creatorhub")

# Client-supplied ids are echoed into headers and logs, so keep them boring
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _ACCEPTED_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Correlate every request with an id.

    Reuses a well-formed `x-request-id` from the client or mints a UUID,
    exposes it on `request.state` and to `get_request_id()`, echoes it on the
    response and logs one `request.complete` line per request, including
    the authenticated user when there is one.
    """

    def __init__(self, app, header_name: str = "x-request-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        rid = _resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = rid
        token = request_id_ctx_var.set(rid)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[self.header_name] = rid

        user = getattr(request.state, "user", None)
        logger.info(
            "request.complete",
            extra={
                "request_id": rid,
                "user_id": getattr(user, "id", None),
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "latency_bucket": latency_bucket_ms(elapsed_ms),
            },
        )
        return response
