import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from canon_reader.services.reader.errors import ReaderError, to_http_payload

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service-related errors."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ServiceUnavailableError(ServiceError):
    """Raised when a collaborator was not initialised."""
    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message, status_code=503)


def setup_exception_handlers(app: FastAPI):
    """Add custom exception handlers to the FastAPI app."""

    @app.exception_handler(ReaderError)
    async def handle_reader_error(request: Request, exc: ReaderError):
        status_code, body = to_http_payload(exc)
        level = logging.WARNING if status_code >= 500 else logging.INFO
        logger.log(level, f"Reader error: {exc.message}", extra={"error_code": exc.code, "ref": exc.ref})
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.warning(f"Service error occurred: {exc.message}", extra={"error_type": type(exc).__name__})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": "service_error", "message": exc.message, "ref": None, "detail": None}},
        )

    @app.exception_handler(Exception)
    async def handle_generic_exception(request: Request, exc: Exception):
        logger.error(f"An unexpected error occurred: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": {"code": "internal_error", "message": "An internal server error occurred.", "ref": None, "detail": None}},
        )

    logger.info("Exception handlers configured.")
