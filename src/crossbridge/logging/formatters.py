"""Text and JSON renderings of log entries."""

import json
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .core import LogEntry, LogFormatter


def _utc(timestamp: float, fmt: Optional[str] = None) -> str:
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    if fmt:
        return moment.strftime(fmt)
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


class JSONFormatter(LogFormatter):
    """One JSON object per entry, suitable for log shippers."""

    def __init__(
        self,
        include_context: bool = True,
        include_extra: bool = True,
        include_traceback: bool = True,
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_extra = include_extra
        self.include_traceback = include_traceback
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        data: Dict[str, Any] = {
            "timestamp": _utc(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
            "message": entry.message,
        }
        if self.include_context:
            data["context"] = entry.context.to_dict()
        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        error = entry.exception
        if error is not None:
            data["exception"] = {"type": type(error).__name__, "message": str(error)}
            if self.include_traceback and error.__traceback__ is not None:
                data["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                )

        return json.dumps(data, indent=self.indent, default=str)


class TextFormatter(LogFormatter):
    """``<time> [LEVEL] logger: message | key=value ...``"""

    DEFAULT_FORMAT = "{timestamp} [{level}] {logger}: {message}"

    def __init__(
        self,
        format_string: Optional[str] = None,
        include_extra: bool = True,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.format_string = format_string or self.DEFAULT_FORMAT
        self.include_extra = include_extra
        self.timestamp_format = timestamp_format

    def format(self, entry: LogEntry) -> str:
        line = self.format_string.format(
            timestamp=_utc(entry.timestamp, self.timestamp_format),
            level=entry.level.value.upper(),
            logger=entry.logger_name,
            message=entry.message,
        )
        if self.include_extra and entry.extra:
            line += " | " + " ".join(f"{key}={value}" for key, value in entry.extra.items())
        if entry.exception is not None:
            line += f" ({type(entry.exception).__name__}: {entry.exception})"
        return line
