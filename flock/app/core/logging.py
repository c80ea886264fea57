# flock/app/core/logging.py
"""
Logging setup and the access-log middleware.

Modules log through ``logging.getLogger(__name__)``. Access lines go to the
namespaced "flock.access" logger so they can be routed separately:
    logging.getLogger("flock.access").setLevel(logging.WARNING)

Never log passwords, tokens or the Authorization header.
"""
import logging
import time

from starlette.requests import Request

access_logger = logging.getLogger("flock.access")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


async def access_log_middleware(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    access_logger.info(
        '%s "%s %s" %d %.2fms',
        request.client.host if request.client else "-",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response
