"""Log filters and processors for crossbridge.

Private keys are 32-byte hex strings. ``RedactingProcessor`` masks anything
shaped like one before an entry reaches a handler, and
``SensitiveDataFilter`` drops entries matching caller-supplied patterns.
Role identifiers share the key shape, so callers log roles by name.
Transaction and block hashes share it too; they are logged under the
extra keys in ``HASH_KEYS``, which the processor leaves intact.
"""

import re
from dataclasses import replace
from typing import Any, FrozenSet, List, Optional

from .core import LogEntry, LogFilter, LogLevel, LogProcessor

PRIVATE_KEY_PATTERN = r"(?<![0-9a-fA-Fx])(?:0x)?[0-9a-fA-F]{64}(?![0-9a-fA-F])"
REDACTED = "[REDACTED]"
HASH_KEYS = frozenset({"tx_hash", "block_hash"})


class LevelFilter(LogFilter):
    """Passes entries whose level lies within an inclusive band."""

    def __init__(self, min_level: LogLevel, max_level: Optional[LogLevel] = None):
        self.min_level = min_level
        self.max_level = max_level or LogLevel.CRITICAL

    def filter(self, entry: LogEntry) -> bool:
        return self.min_level.rank <= entry.level.rank <= self.max_level.rank


class SensitiveDataFilter(LogFilter):
    """Drops entries whose text matches any of the given patterns (case-insensitive)."""

    def __init__(self, patterns: List[str]):
        self.patterns = [re.compile(p, re.IGNORECASE) for p in patterns]

    def filter(self, entry: LogEntry) -> bool:
        values = [entry.message]
        values.extend(v for v in entry.extra.values() if isinstance(v, str))
        if entry.context.metadata:
            values.extend(
                v for v in entry.context.metadata.values() if isinstance(v, str)
            )

        return not any(p.search(value) for value in values for p in self.patterns)


class RedactingProcessor(LogProcessor):
    """Mask key-shaped hex strings in messages and extra fields."""

    def __init__(
        self,
        patterns: Optional[List[str]] = None,
        exempt_keys: FrozenSet[str] = HASH_KEYS,
    ):
        self.patterns = [re.compile(p) for p in (patterns or [PRIVATE_KEY_PATTERN])]
        self.exempt_keys = frozenset(exempt_keys)

    def _scrub(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        for pattern in self.patterns:
            value = pattern.sub(REDACTED, value)
        return value

    def process(self, entry: LogEntry) -> LogEntry:
        """Return a copy of the entry with secrets masked."""
        return replace(
            entry,
            message=self._scrub(entry.message),
            extra={
                key: value if key in self.exempt_keys else self._scrub(value)
                for key, value in entry.extra.items()
            },
        )
