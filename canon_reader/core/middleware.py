import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .logging_config import request_id_var

logger = logging.getLogger(__name__)


async def logging_middleware(request: Request, call_next) -> Response:
    """Tag the request with an id (the caller's ``X-Request-ID`` when given) and log its outcome."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
    finally:
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time-MS"] = f"{elapsed_ms:.2f}"
    return response


def setup_cors_middleware(app, cors_origins: str):
    """
    Allow the configured origins to call the read-only reader API.

    Args:
        app: FastAPI application instance
        cors_origins: Comma-separated list of allowed origins
    """
    origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
