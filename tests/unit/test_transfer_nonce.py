"""
Unit tests for transfer nonce generation.
"""

import pytest

from crossbridge.errors import InvalidAddress, PayloadFormatError
from crossbridge.transfer.nonce import (
    NONCE_HEX_LEN,
    Nonce,
    NonceGenerator,
    address_tail,
    generate_nonce,
)

SENDER = "0x52908400098527886E0F7030069857D2E4169EE7"


def fixed_random(value: bytes):
    def source(n):
        return value[:n]

    return source


class TestAddressTail:
    """Test sender address normalization for nonces."""

    def test_lowercases_and_strips_prefix(self):
        """Test the tail is 40 lowercase hex chars."""
        assert address_tail(SENDER) == SENDER[2:].lower()
        assert address_tail(SENDER[2:]) == SENDER[2:].lower()

    def test_longer_input_keeps_last_20_bytes(self):
        """Test a padded 32-byte value reduces to its address."""
        padded = "0x" + "0" * 24 + SENDER[2:]
        assert address_tail(padded) == SENDER[2:].lower()

    @pytest.mark.parametrize("value", ["0x1234", "0x" + "zz" * 20, "", 12345, None])
    def test_rejects_non_addresses(self, value):
        """Test short, non-hex or non-string senders."""
        with pytest.raises(InvalidAddress):
            address_tail(value)


class TestNonceGenerator:
    """Test NonceGenerator functionality."""

    def test_layout(self):
        """Test timestamp, address tail and random suffix placement."""
        generator = NonceGenerator(
            clock=lambda: 0x01020304, random_bytes=fixed_random(b"\xaa" * 8)
        )

        nonce = generator.generate(SENDER)

        assert len(nonce.hex) == NONCE_HEX_LEN
        assert nonce.hex == "01020304" + SENDER[2:].lower() + "aa" * 8
        assert nonce.timestamp == 0x01020304
        assert nonce.random == b"\xaa" * 8

    def test_timestamp_wraps_at_32_bits(self):
        """Test the millisecond clock is truncated, not rejected."""
        generator = NonceGenerator(clock=lambda: 2**32 + 5, random_bytes=fixed_random(b"\x00" * 8))

        nonce = generator.generate(SENDER)

        assert nonce.timestamp == 5
        assert nonce.hex.startswith("00000005")

    def test_same_millisecond_differs_by_random_suffix(self):
        """Test two nonces in one millisecond are distinct."""
        suffixes = iter([b"\x01" * 8, b"\x02" * 8])
        generator = NonceGenerator(clock=lambda: 1000, random_bytes=lambda n: next(suffixes))

        first = generator.generate(SENDER)
        second = generator.generate(SENDER)

        assert first.hex[:48] == second.hex[:48]
        assert first != second

    def test_short_random_source_rejected(self):
        """Test a random source returning too few bytes."""
        generator = NonceGenerator(clock=lambda: 0, random_bytes=lambda n: b"\x00")

        with pytest.raises(ValueError):
            generator.generate(SENDER)

    def test_invalid_sender(self):
        """Test generation for an invalid sender."""
        with pytest.raises(InvalidAddress):
            NonceGenerator().generate("not-an-address")

    def test_default_generator_is_random(self):
        """Test the wall-clock generator produces distinct nonces."""
        first = generate_nonce(SENDER)
        second = generate_nonce(SENDER)

        assert first.address_tail == SENDER[2:].lower()
        assert first.random != second.random


class TestNonce:
    """Test Nonce parsing and views."""

    def test_value_matches_hex(self):
        """Test the integer view of a nonce."""
        nonce = Nonce(timestamp=1, address_tail="00" * 20, random=b"\x00" * 7 + b"\x02")

        assert nonce.value == int(nonce.hex, 16)
        assert str(nonce) == nonce.hex

    def test_from_hex(self):
        """Test parsing a nonce back into fields."""
        original = Nonce(timestamp=0xDEADBEEF, address_tail=SENDER[2:].lower(), random=b"\x11" * 8)

        assert Nonce.from_hex(original.hex) == original
        assert Nonce.from_hex("0x" + original.hex.upper()) == original

    @pytest.mark.parametrize("text", ["00", "g" * NONCE_HEX_LEN, "0" * (NONCE_HEX_LEN + 2)])
    def test_from_hex_invalid(self, text):
        """Test malformed nonce text."""
        with pytest.raises(PayloadFormatError):
            Nonce.from_hex(text)
