"""
Transfer nonce generation.

A nonce is 32 bytes: a 4-byte millisecond timestamp, the last 20 bytes of
the sender address and 8 random bytes. The timestamp is truncated to 32
bits and therefore wraps roughly every 49.7 days; uniqueness rests on the
random suffix, not on the clock. The generator keeps no record of issued
nonces, so duplicate detection belongs to the destination network.
"""

import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..errors import InvalidAddress, PayloadFormatError

TIMESTAMP_HEX_LEN = 8
ADDRESS_HEX_LEN = 40
RANDOM_BYTES = 8
NONCE_HEX_LEN = TIMESTAMP_HEX_LEN + ADDRESS_HEX_LEN + RANDOM_BYTES * 2

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def address_tail(address: str) -> str:
    """Return the last 20 bytes of an address as 40 lowercase hex chars."""
    if not isinstance(address, str):
        raise InvalidAddress(f"Address must be a hex string, got {type(address).__name__}", value=address)

    text = address[2:] if address[:2].lower() == "0x" else address
    if len(text) < ADDRESS_HEX_LEN or not set(text) <= _HEX_DIGITS:
        raise InvalidAddress(f"Not a 20-byte hex address: {address!r}", value=address)
    return text[-ADDRESS_HEX_LEN:].lower()


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Nonce:
    """Opaque per-transfer uniqueness token."""

    timestamp: int
    address_tail: str
    random: bytes

    @property
    def hex(self) -> str:
        """64 hex chars: timestamp, address tail, random suffix."""
        return f"{self.timestamp:08x}{self.address_tail}{self.random.hex()}"

    @property
    def value(self) -> int:
        """The nonce as an unsigned 256-bit integer."""
        return int(self.hex, 16)

    def __str__(self) -> str:
        return self.hex

    @classmethod
    def from_hex(cls, text: str) -> "Nonce":
        """Parse the 64-hex-char nonce layout."""
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != NONCE_HEX_LEN or not set(text) <= _HEX_DIGITS:
            raise PayloadFormatError(
                f"Nonce must be {NONCE_HEX_LEN} hex characters", field="nonce", value=text
            )

        address_end = TIMESTAMP_HEX_LEN + ADDRESS_HEX_LEN
        return cls(
            timestamp=int(text[:TIMESTAMP_HEX_LEN], 16),
            address_tail=text[TIMESTAMP_HEX_LEN:address_end].lower(),
            random=bytes.fromhex(text[address_end:]),
        )


class NonceGenerator:
    """Builds nonces from an injectable millisecond clock and randomness source."""

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        random_bytes: Optional[Callable[[int], bytes]] = None,
    ):
        self.clock = clock or _wall_clock_ms
        self.random_bytes = random_bytes or secrets.token_bytes

    def generate(self, sender: str) -> Nonce:
        """Generate a nonce for ``sender``."""
        tail = address_tail(sender)
        timestamp = int(self.clock()) & 0xFFFFFFFF

        suffix = self.random_bytes(RANDOM_BYTES)
        if len(suffix) != RANDOM_BYTES:
            raise ValueError(f"Random source returned {len(suffix)} bytes, expected {RANDOM_BYTES}")

        return Nonce(timestamp=timestamp, address_tail=tail, random=bytes(suffix))


_default_generator = NonceGenerator()


def generate_nonce(sender: str) -> Nonce:
    """Generate a nonce with the default wall-clock generator."""
    return _default_generator.generate(sender)
