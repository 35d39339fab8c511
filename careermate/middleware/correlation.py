"""
Request correlation.

Each request gets an ID (the client's X-Correlation-ID when sent, otherwise a
new UUID4). It is bound to the logging context for the duration of the request,
echoed back in the X-Correlation-ID response header, and every request is
logged once on completion with its status and duration.
"""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from careermate.utils import metrics
from careermate.utils.logger import correlation_id_var, get_logger

logger = get_logger("http")

HEADER = "X-Correlation-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get(HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(cid)
        started = time.monotonic()
        details = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "",
        }
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    f"{request.method} {request.url.path} failed",
                    extra={**details, "error_type": type(exc).__name__, "duration_ms": self._elapsed(started)},
                )
                raise

            duration = self._elapsed(started)
            metrics.observe("http.duration_ms", duration)
            logger.log(
                logging.WARNING if response.status_code >= 400 else logging.INFO,
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={**details, "status": response.status_code, "duration_ms": duration},
            )
            response.headers[HEADER] = cid
            return response
        finally:
            correlation_id_var.reset(token)

    @staticmethod
    def _elapsed(started: float) -> int:
        return round((time.monotonic() - started) * 1000)

