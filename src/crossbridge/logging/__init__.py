"""crossbridge logging system.

Structured logging with JSON and text formatting, console and in-memory
handlers, and redaction of key material before entries are emitted.
"""

from .core import (
    BridgeLogger,
    LogConfig,
    LogContext,
    LogEntry,
    LogFilter,
    LogFormatter,
    LogHandler,
    LogLevel,
    LogManager,
    LogProcessor,
    get_logger,
    get_manager,
    setup_logging,
    shutdown_logging,
)
from .filters import HASH_KEYS, LevelFilter, RedactingProcessor, SensitiveDataFilter
from .formatters import JSONFormatter, TextFormatter
from .handlers import ConsoleHandler, MemoryHandler

__all__ = [
    # Core
    "BridgeLogger",
    "LogLevel",
    "LogConfig",
    "LogContext",
    "LogEntry",
    "LogFilter",
    "LogFormatter",
    "LogHandler",
    "LogManager",
    "LogProcessor",
    "get_logger",
    "get_manager",
    "setup_logging",
    "shutdown_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Handlers
    "ConsoleHandler",
    "MemoryHandler",
    # Filters
    "LevelFilter",
    "SensitiveDataFilter",
    "RedactingProcessor",
    "HASH_KEYS",
]
