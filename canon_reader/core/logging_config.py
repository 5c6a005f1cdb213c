import contextvars
import json
import logging
import time

# Define context variables
request_id_var = contextvars.ContextVar("request_id", default=None)
generation_var = contextvars.ContextVar("reader_generation", default=None)

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {
    "message",
    "asctime",
    "request_id",
    "reader_generation",
}

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [req=%(request_id)s gen=%(reader_generation)s] %(message)s"


class ContextFilter(logging.Filter):
    """Copies the request id and reader generation onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        generation = generation_var.get()
        record.reader_generation = "-" if generation is None else generation
        return True


class JsonContextFormatter(logging.Formatter):
    """Renders a record, its context and its ``extra=`` fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            log_record["request_id"] = request_id
        generation = getattr(record, "reader_generation", "-")
        if generation != "-":
            log_record["reader_generation"] = generation

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_record[key] = value

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)


def setup_logging(settings):
    """Install one stderr handler on the root logger, JSON when ``LOG_JSON`` is set."""
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonContextFormatter() if settings.LOG_JSON else logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(handler)

    # Third-party chatter
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info("Logging configured", extra={"json": settings.LOG_JSON, "level": settings.LOG_LEVEL})
