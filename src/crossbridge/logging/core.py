"""Core logging types and the global log manager for crossbridge.

Entries flow from a ``BridgeLogger`` to its ``LogManager``, through every
processor (which may rewrite the entry, e.g. to mask secrets) and then to
every registered handler (whose filters may only drop it).
"""

import json
import sys
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels, in increasing severity."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {level: rank for rank, level in enumerate(LogLevel)}


@dataclass
class LogContext:
    """Ambient fields attached to every entry: where the work is happening."""

    component: Optional[str] = None
    network: Optional[str] = None
    bridge: Optional[str] = None
    token_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def merged(self, other: Optional["LogContext"]) -> "LogContext":
        """Copy of this context with the fields set on ``other`` taking precedence."""
        if other is None:
            return self
        return LogContext(
            component=other.component or self.component,
            network=other.network or self.network,
            bridge=other.bridge or self.bridge,
            token_id=self.token_id if other.token_id is None else other.token_id,
            metadata={**self.metadata, **other.metadata},
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LogEntry:
    """One log record as seen by processors and handlers."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext = field(default_factory=LogContext)
    exception: Optional[BaseException] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    thread: str = field(default_factory=lambda: threading.current_thread().name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "logger": self.logger_name,
            "message": self.message,
            "context": self.context.to_dict(),
            "extra": dict(self.extra),
            "exception": repr(self.exception) if self.exception else None,
            "thread": self.thread,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


@dataclass
class LogConfig:
    """Logging setup.

    ``handlers`` names the built-in handlers to install; only ``"console"``
    is built in, others are registered with ``LogManager.add_handler``.
    ``redact`` installs the private-key masking processor.
    """

    name: str = "crossbridge"
    level: LogLevel = LogLevel.INFO
    format_type: str = "text"
    handlers: List[str] = field(default_factory=lambda: ["console"])
    redact: bool = True


class LogFilter(ABC):
    """Decides whether a handler emits an entry."""

    @abstractmethod
    def filter(self, entry: LogEntry) -> bool:
        """Return False to drop ``entry``."""


class LogFormatter(ABC):
    """Turns an entry into text."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        ...


class LogProcessor(ABC):
    """Rewrites entries before any handler sees them."""

    @abstractmethod
    def process(self, entry: LogEntry) -> LogEntry:
        ...


class LogHandler(ABC):
    """Destination for log entries."""

    def __init__(self, name: Optional[str] = None, level: LogLevel = LogLevel.DEBUG):
        self.name = name or type(self).__name__
        self.level = level
        self.formatter: Optional[LogFormatter] = None
        self.filters: List[LogFilter] = []

    def set_formatter(self, formatter: LogFormatter) -> None:
        self.formatter = formatter

    def add_filter(self, filter_obj: LogFilter) -> None:
        self.filters.append(filter_obj)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def render(self, entry: LogEntry) -> str:
        """Formatted text, or the bare message when no formatter is set."""
        if self.formatter is None:
            return entry.message
        return self.formatter.format(entry)

    def handle(self, entry: LogEntry) -> None:
        if entry.level.rank < self.level.rank:
            return
        if all(f.filter(entry) for f in self.filters):
            self.emit(entry)

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        ...


class LogManager:
    """Routes entries from loggers through processors to handlers."""

    def __init__(self, config: Optional[LogConfig] = None):
        self.config = config or LogConfig()
        self.loggers: Dict[str, "BridgeLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self.processors: List[LogProcessor] = []
        self._context = LogContext()
        self._lock = threading.RLock()

        self._install_defaults()

    def _install_defaults(self) -> None:
        from .filters import RedactingProcessor
        from .formatters import JSONFormatter, TextFormatter
        from .handlers import ConsoleHandler

        if "console" in self.config.handlers:
            console = ConsoleHandler(stream=sys.stderr)
            console.set_formatter(
                JSONFormatter() if self.config.format_type == "json" else TextFormatter()
            )
            self.add_handler("console", console)

        if self.config.redact:
            self.add_processor(RedactingProcessor())

    def get_logger(self, name: str) -> "BridgeLogger":
        """Logger bound to this manager."""
        with self._lock:
            return self.loggers.setdefault(name, BridgeLogger(name, self))

    def add_handler(self, name: str, handler: LogHandler) -> None:
        with self._lock:
            self.handlers[name] = handler

    def remove_handler(self, name: str) -> Optional[LogHandler]:
        with self._lock:
            return self.handlers.pop(name, None)

    def add_processor(self, processor: LogProcessor) -> None:
        with self._lock:
            self.processors.append(processor)

    def set_context(self, context: LogContext) -> None:
        """Replace the context merged into every entry."""
        with self._lock:
            self._context = context

    def get_context(self) -> LogContext:
        return self._context

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self._lock:
            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=self._context.merged(context),
                exception=exception,
                extra=dict(extra or {}),
            )
            for processor in self.processors:
                entry = processor.process(entry)
            handlers = list(self.handlers.values())

        for handler in handlers:
            handler.handle(entry)

    def shutdown(self) -> None:
        """Close and drop every handler."""
        with self._lock:
            for handler in self.handlers.values():
                close = getattr(handler, "close", None)
                if close is not None:
                    close()
            self.handlers.clear()
            self.processors.clear()
            self.loggers.clear()


class BridgeLogger:
    """Named logger.

    A logger created without a manager resolves the global one on every
    call, so module-level loggers follow ``setup_logging``. ``bind`` returns
    a child logger that adds fixed fields to each entry's extra.
    """

    def __init__(
        self,
        name: str,
        manager: Optional[LogManager] = None,
        fields: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self._manager = manager
        self.fields: Dict[str, Any] = dict(fields or {})
        self.level: Optional[LogLevel] = None

    @property
    def manager(self) -> LogManager:
        return self._manager or get_manager()

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        threshold = self.level or self.manager.config.level
        return level.rank >= threshold.rank

    def bind(self, **fields: Any) -> "BridgeLogger":
        child = BridgeLogger(self.name, self._manager, {**self.fields, **fields})
        child.level = self.level
        return child

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self.is_enabled_for(level):
            return
        if self.fields:
            extra = {**self.fields, **(extra or {})}
        self.manager.log(
            level,
            message,
            logger_name=self.name,
            context=context,
            exception=exception,
            extra=extra,
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self.log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at error level with the exception currently being handled."""
        kwargs.setdefault("exception", sys.exc_info()[1])
        self.log(LogLevel.ERROR, message, **kwargs)


_manager: Optional[LogManager] = None
_manager_lock = threading.Lock()
_module_loggers: Dict[str, BridgeLogger] = {}


def get_logger(name: str = "crossbridge") -> BridgeLogger:
    """Module logger that follows whichever global manager is installed."""
    with _manager_lock:
        if name not in _module_loggers:
            _module_loggers[name] = BridgeLogger(name)
        return _module_loggers[name]


def get_manager() -> LogManager:
    """The global manager, created with defaults on first use."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = LogManager()
        return _manager


def setup_logging(config: LogConfig) -> LogManager:
    """Install a new global manager, shutting down the previous one."""
    global _manager
    with _manager_lock:
        previous, _manager = _manager, LogManager(config)
    if previous is not None:
        previous.shutdown()
    return _manager


def shutdown_logging() -> None:
    global _manager
    with _manager_lock:
        previous, _manager = _manager, None
    if previous is not None:
        previous.shutdown()
