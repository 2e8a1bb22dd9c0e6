"""
Structured logging utilities: JSON log lines for the import/export pipeline.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class StructuredLogger:
    """
    Structured logger that outputs JSON payloads for easy parsing and querying
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log(self, level: str, message: str, **kwargs: Any) -> None:
        """Log with structured data"""
        log_data: Dict[str, Any] = {"event": message, **kwargs}
        log_method = getattr(self.logger, level, None)
        if log_method is None:
            raise ValueError(f"Unknown log level: {level}")
        log_method(json.dumps(log_data, default=str, ensure_ascii=False))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info level"""
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning level"""
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error level"""
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug level"""
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str, ensure_ascii=False)


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """Attach a stdout handler to the ``vitalscribe`` logger (idempotent)."""
    root = logging.getLogger("vitalscribe")
    root.setLevel(level)
    if not any(getattr(h, "_vitalscribe_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler._vitalscribe_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    for handler in root.handlers:
        if getattr(handler, "_vitalscribe_handler", False):
            if fmt == "json":
                handler.setFormatter(JSONFormatter())
            else:
                handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
    return root


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger"""
    return StructuredLogger(name)
