"""Request logging middleware.

Every request carries a request id: the caller's X-Request-ID when it has our
format (the socket layer forwards the id of the request that triggered a
push), otherwise a fresh one. The id is stored on request.state for the
ApiResponse envelope, echoed in the response header and written to the
access log:

    INFO [POST] /api/v1/orders → 201 (23ms) req_a1b2c3d4e5f6

5xx responses are logged at WARNING.
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("ct.request")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^req_[0-9a-f]{12}$")


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def inbound_request_id(request: Request) -> str:
    candidate = request.headers.get(REQUEST_ID_HEADER, "")
    return candidate if _REQUEST_ID_RE.match(candidate) else new_request_id()


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = inbound_request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.error(
                "[%s] %s → unhandled (%.0fms) %s",
                request.method,
                request.url.path,
                (time.perf_counter() - start) * 1000,
                request_id,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
