"""Request latency logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

SLOW_REQUEST_THRESHOLD_MS = 1000
VERY_SLOW_REQUEST_THRESHOLD_MS = 3000

HEALTH_PATHS = ("/health", "/health/ready")


async def latency_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Log one line per request, with the level raised for errors and slow requests.

    Args:
        request: The incoming request.
        call_next: The next middleware/handler in the chain.

    Returns:
        Response: The response from the handler.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path
    is_health_check = path in HEALTH_PATHS

    response = None
    error_occurred = False

    try:
        response = await call_next(request)
        return response
    except Exception:
        error_occurred = True
        raise
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response else 500
        log_msg = f"{method} {path} - {status_code} - {latency_ms:.2f}ms"
        log_data = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "latency_ms": round(latency_ms, 2),
        }

        if is_health_check:
            logger.debug(log_msg, extra=log_data)
        elif error_occurred or status_code >= 500:
            logger.error(log_msg, extra=log_data)
        elif latency_ms > VERY_SLOW_REQUEST_THRESHOLD_MS:
            logger.error(f"VERY SLOW REQUEST: {log_msg}", extra=log_data)
        elif latency_ms > SLOW_REQUEST_THRESHOLD_MS or status_code >= 400:
            logger.warning(log_msg, extra=log_data)
        else:
            logger.info(log_msg, extra=log_data)
