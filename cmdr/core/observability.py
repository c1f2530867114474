"""
Structured logging for cmdr.

Log calls take a message plus optional ``metadata`` and ``error`` and are
emitted as single-line JSON documents through the standard logging module.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from cmdr.core.redact import redact_text

# Longest command line written to a log entry
MAX_LOGGED_COMMAND = 200


class LogLevel(Enum):
    """Log levels for structured logging."""

    DEBUG = "debug"
    INFO = "info"
    ERROR = "error"


@dataclass
class LogEntry:
    """Structured log entry."""

    timestamp: str
    level: str
    message: str
    service: str = "cmdr"
    component: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    duration_ms: Optional[float] = None


class StructuredLogger:
    """Structured JSON logger."""

    def __init__(self, name: str, output_file: Optional[Path] = None):
        """Initialize structured logger.

        Args:
            name: Logger name (usually module name)
            output_file: Optional file path for JSON log output
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.output_file = output_file

        if output_file:
            self._setup_json_handler(output_file)

    def _setup_json_handler(self, output_file: Path):
        output_file.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(output_file)
        handler.setFormatter(JSONFormatter())
        self.logger.addHandler(handler)

    def _log(self, level: LogLevel, message: str, **kwargs):
        method = getattr(self.logger, level.value)
        if not self.logger.isEnabledFor(getattr(logging, level.name)):
            return
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level.value,
            message=message,
            component=self.name,
            **kwargs,
        )
        log_dict = {k: v for k, v in asdict(entry).items() if v is not None}
        method(json.dumps(log_dict, default=str))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def error(self, message: str, error: Optional[Exception] = None, **kwargs):
        """Log error message."""
        error_dict = None
        if error:
            error_dict = {
                "type": type(error).__name__,
                "message": str(error),
            }
        self._log(LogLevel.ERROR, message, error=error_dict, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter that redacts secrets."""

    def format(self, record):
        msg = record.getMessage()
        if msg.startswith("{"):
            return redact_text(msg)
        return json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname.lower(),
                "message": redact_text(msg),
                "component": record.name,
            }
        )


def truncate_command(cmd: str) -> str:
    if len(cmd) <= MAX_LOGGED_COMMAND:
        return cmd
    return cmd[:MAX_LOGGED_COMMAND] + "..."


_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(name: str, output_file: Optional[Path] = None) -> StructuredLogger:
    """Get or create a structured logger.

    Args:
        name: Logger name
        output_file: Optional JSON output file

    Returns:
        StructuredLogger instance
    """
    if name not in _logger_cache:
        _logger_cache[name] = StructuredLogger(name, output_file)
    return _logger_cache[name]


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None):
    """Configure the root logger, optionally adding a JSON file handler.

    Args:
        log_level: Logging level name
        log_file: Optional JSON log file path
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper()))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
        handler.setFormatter(JSONFormatter())
        logging.getLogger().addHandler(handler)
