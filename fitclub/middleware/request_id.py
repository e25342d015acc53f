import time
import uuid
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from fitclub.utils.logger import set_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

# Polled by load balancers; no start/end lines for these
QUIET_PATHS = {"/", "/health"}


def resolve_request_id(request: Request) -> str:
    """An incoming X-Correlation-ID wins over X-Request-ID; otherwise a fresh UUID4."""
    return (
        request.headers.get("X-Correlation-ID") or
        request.headers.get("X-Request-ID") or
        str(uuid.uuid4())
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an ID for log correlation and echoes it back in
    X-Request-ID. The completion line carries the member resolved by auth
    (request.state.user_id) and the time spent, so a check-in can be traced
    from the gateway to the streak update it caused.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        set_request_context(request_id)
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        if not quiet:
            logger.info(f"Request started: {request.method} {request.url.path}", request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            if not quiet:
                elapsed_ms = (time.perf_counter() - started) * 1000
                member = getattr(request.state, "user_id", None) or "anonymous"
                logger.info(
                    f"Request completed: {request.method} {request.url.path} - Status: {response.status_code} "
                    f"member={member} took={elapsed_ms:.1f}ms",
                    request_id=request_id
                )
            return response

        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path} - Error: {str(e)}",
                request_id=request_id
            )
            raise
        finally:
            clear_request_context()
