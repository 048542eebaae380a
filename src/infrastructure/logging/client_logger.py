"""
Structured logging for the job board client.

Records emitted around API calls carry the request method, path, HTTP
status and duration. Console output is either one JSON object per line
or a compact human-readable line.
"""
import json
import logging
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any, Union

ROOT_LOGGER_NAME = "src"

REQUEST_FIELDS = ("method", "path", "status_code", "duration_ms")


@dataclass
class LogEntry:
    """One log line; request fields are set only for API call records."""
    timestamp: str
    level: str
    message: str
    component: str
    method: Optional[str] = None
    path: Optional[str] = None
    status_code: Optional[int] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: logging.LogRecord, timestamp: str) -> "LogEntry":
        request = {name: getattr(record, name, None) for name in REQUEST_FIELDS}
        return cls(
            timestamp=timestamp,
            level=record.levelname,
            message=record.getMessage(),
            # src.gui.application.operational_monitor -> operational_monitor
            component=record.name.rsplit(".", 1)[-1],
            error=str(record.exc_info[1]) if record.exc_info else None,
            extra=getattr(record, "context", None) or {},
            **request,
        )

    def to_json(self) -> str:
        data = {
            "timestamp": self.timestamp,
            "level": self.level,
            "component": self.component,
            "message": self.message,
        }
        for name in REQUEST_FIELDS + ("error",):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.extra:
            data["extra"] = self.extra
        return json.dumps(data, default=str)

    def to_human(self) -> str:
        line = f"[{self.timestamp}] [{self.level}] [{self.component}] {self.message}"
        if self.status_code is not None:
            line += f" -> {self.status_code}"
        if self.duration_ms is not None:
            line += f" ({self.duration_ms:.2f}ms)"
        if self.error:
            line += f" ERROR: {self.error}"
        return line


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).isoformat()
        return LogEntry.from_record(record, timestamp).to_json()


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        return LogEntry.from_record(record, timestamp).to_human()


class TimedOperation:
    """
    Context manager timing one API call.

    Set ``status_code`` inside the block once the response is known.

    Usage:
        with TimedOperation(logger, "GET", "/jobs/stats/") as call:
            response = await client.get(...)
            call.status_code = response.status_code
    """

    def __init__(
        self,
        logger: logging.Logger,
        method: str,
        path: str,
        **context: Any,
    ):
        self._logger = logger
        self.method = method
        self.path = path
        self._context = context
        self._start: Optional[float] = None
        self.status_code: Optional[int] = None
        self.duration_ms: Optional[float] = None

    def _extra(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "duration_ms": self.duration_ms,
            "context": self._context,
        }

    def __enter__(self):
        self._start = time.perf_counter()
        self._logger.debug(f"{self.method} {self.path}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self._start) * 1000

        if exc_type:
            self._logger.warning(
                f"{self.method} {self.path} failed: {exc_val}",
                extra=self._extra(),
            )
        else:
            self._logger.debug(
                f"{self.method} {self.path} completed",
                extra=self._extra(),
            )

        return False  # Don't suppress exceptions


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Install handlers on the client's logger hierarchy.

    Args:
        level: Logging level name for the console
        json_output: Use JSONFormatter on the console
        log_file: Optional file that always receives DEBUG-level JSON lines

    Returns:
        The configured root logger of the client
    """
    console_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else console_level)

    # Remove existing handlers
    logger.handlers.clear()
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(JSONFormatter() if json_output else HumanFormatter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger
