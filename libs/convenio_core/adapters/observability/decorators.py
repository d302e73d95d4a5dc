import time
from functools import wraps

import structlog

logger = structlog.get_logger("http")


def track_http(view_name):
    """Registra método, status e duração de cada chamada da view."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(self, request, *args, **kwargs):
            start = time.perf_counter()
            status = 500
            try:
                resp = fn(self, request, *args, **kwargs)
                status = getattr(resp, "status_code", 200)
                return resp
            except Exception as exc:
                status = getattr(exc, "status_code", 500)
                raise
            finally:
                logger.info(
                    "http.request",
                    view=view_name,
                    method=request.method,
                    status=status,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
        return wrapper
    return decorator
