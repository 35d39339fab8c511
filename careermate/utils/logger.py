"""
Application logging.

All loggers are children of "careermate". Every record is stamped with the
correlation ID of the request being served (set by CorrelationMiddleware),
so log lines from the extractor, gateway and routes can be joined per request.

LOG_FORMAT=json  one JSON object per line on stdout (hosted environments)
otherwise        short human-readable lines; LOG_TO_FILE=true adds a rotating
                 JSON file under logs/
"""
import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")

# Fields routes and services pass through `extra=`
EXTRA_KEYS = (
    "method", "path", "status", "duration_ms", "client_ip", "error", "error_type",
    "provider", "attempt", "wait_seconds", "operation", "entity", "repaired_fields", "preview",
)


class CorrelationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "correlation_id", ""):
            entry["correlation_id"] = record.correlation_id
        entry.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})

        if record.levelno >= logging.WARNING:
            entry["source"] = f"{record.filename}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """`12:01:33 WARNING careermate.gateway [3f2a9c1e] message`"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s%(cid)s %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        cid = getattr(record, "correlation_id", "")
        record.cid = f" [{cid[:8]}]" if cid else ""
        return super().format(record)


def setup_logger(name: str = "careermate", level: str = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    as_json = os.getenv("LOG_FORMAT", "").lower() == "json"
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter() if as_json else ConsoleFormatter())
    console.addFilter(CorrelationFilter())
    logger.addHandler(console)

    if not as_json and os.getenv("LOG_TO_FILE", "false").lower() == "true":
        try:
            Path("logs").mkdir(exist_ok=True)
            file_handler = RotatingFileHandler(
                Path("logs") / "careermate.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(StructuredFormatter())
            file_handler.addFilter(CorrelationFilter())
            logger.addHandler(file_handler)
        except OSError as e:
            # Read-only filesystem on hosted platforms
            logger.warning(f"Could not setup file logging: {e}")

    return logger


logger = setup_logger()


def get_logger(name: str = None) -> logging.Logger:
    """Named loggers are children of the app logger and share its handlers"""
    return logger.getChild(name) if name else logger
