"""Console and in-memory log handlers."""

import sys
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional, TextIO

from .core import LogEntry, LogHandler


class ConsoleHandler(LogHandler):
    """Writes rendered entries to a text stream (stderr by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self.stream: Optional[TextIO] = stream if stream is not None else sys.stderr
        self._lock = threading.Lock()

    def emit(self, entry: LogEntry) -> None:
        line = self.render(entry)
        with self._lock:
            if self.stream is None:
                return
            self.stream.write(line + "\n")
            self.stream.flush()

    def close(self) -> None:
        # The stream is borrowed, so it is detached rather than closed.
        with self._lock:
            self.stream = None


class MemoryHandler(LogHandler):
    """Keeps the most recent ``max_size`` entries as dictionaries."""

    def __init__(self, max_size: int = 1000):
        super().__init__()
        self.max_size = max_size
        self._buffer: Deque[Dict[str, Any]] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def emit(self, entry: LogEntry) -> None:
        record = {
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "message": entry.message,
            "logger_name": entry.logger_name,
            "extra": dict(entry.extra),
            "formatted": self.render(entry),
        }
        with self._lock:
            self._buffer.append(record)

    def get_logs(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._buffer)

    def clear_logs(self) -> None:
        with self._lock:
            self._buffer.clear()

    def close(self) -> None:
        self.clear_logs()
