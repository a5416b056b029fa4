import time
import uuid

import structlog

from .logs import clear_context, add_context

log = structlog.get_logger(__name__)


class RequestLogMiddleware:
    """Bind a request id to every log event emitted while serving a request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        clear_context()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        add_context(request_id=request_id, method=request.method, path=request.path)

        started = time.monotonic()
        response = self.get_response(request)
        response["X-Request-ID"] = request_id

        log.info(
            "request.finished",
            status=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        clear_context()
        return response
