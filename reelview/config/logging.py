"""
Structured logging configuration.
Outputs logs in JSON format for production observability.
"""
import json
import logging
import sys

# Context attributes callers attach through ``extra=``.
CONTEXT_FIELDS = ("session_id", "item_id", "user_id")

# Transport loggers under the backend client; supabase-py speaks HTTP/2
# through httpx, so h2/hpack frame logs show up at DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "h2")


class JsonFormatter(logging.Formatter):
    """Format log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record as JSON."""
        log_obj = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Session/item/user context attached by services
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        return json.dumps(log_obj)


def configure_logging(debug: bool = False) -> None:
    """Configure root logger; JSON in production, plain text when debugging."""
    handler = logging.StreamHandler(sys.stdout)

    if debug:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )
    else:
        # JSON format for production
        formatter = JsonFormatter()

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Reduce noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").handlers = [handler]  # Use our handler
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
