"""
Canonical byte layout for cross-chain transfer requests.

Layout (hex characters, after the ``0x`` prefix)::

    amount               64   atomic units, big-endian, zero padded
    source network        8
    destination network   8
    token id              8
    sender               64   20-byte address left padded with zeros
    nonce                64   timestamp(8) | address tail(40) | random(16)

The destination bridge decodes by position, so field widths and order are
fixed on both sides of a bridge pair.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from web3 import Web3

from ..errors import InvalidAddress, PayloadFormatError
from ..logging import get_logger
from .nonce import NONCE_HEX_LEN, Nonce, NonceGenerator, address_tail
from .units import DEFAULT_DECIMALS, from_atomic, to_atomic_hex, to_hex32

logger = get_logger(__name__)

AMOUNT_HEX_LEN = 64
NETWORK_HEX_LEN = 8
TOKEN_HEX_LEN = 8
SENDER_HEX_LEN = 64
PAYLOAD_HEX_LEN = (
    AMOUNT_HEX_LEN + NETWORK_HEX_LEN * 2 + TOKEN_HEX_LEN + SENDER_HEX_LEN + NONCE_HEX_LEN
)
PAYLOAD_BYTES = PAYLOAD_HEX_LEN // 2

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def normalize_address(address: str) -> str:
    """Validate a 20-byte hex address and return its checksum form."""
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddress(f"Not a 20-byte hex address: {address!r}", value=address)
    return Web3.to_checksum_address(address.lower())


@dataclass(frozen=True)
class TransferIntent:
    """A caller's request to move ``amount`` of ``token`` between networks."""

    sender: str
    source_network: int
    destination_network: int
    token: int
    amount: Union[str, int, Decimal]

    def __post_init__(self):
        object.__setattr__(self, "sender", normalize_address(self.sender))


@dataclass(frozen=True)
class TransferPayload:
    """Encoded transfer request plus the fields it was built from."""

    data: str
    amount: str
    amount_hex: str
    source_network: int
    destination_network: int
    token: int
    sender: str
    nonce: Nonce
    decimals: int = DEFAULT_DECIMALS

    @property
    def nonce_hex(self) -> str:
        return self.nonce.hex

    @property
    def atomic_amount(self) -> int:
        return int(self.amount_hex, 16)

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.data[2:])

    def to_dict(self) -> Dict[str, Any]:
        """Dictionary view matching the fields reported to callers."""
        return {
            "amount": self.amount,
            "amountHex": self.amount_hex,
            "sourceNetwork": self.source_network,
            "destinationNetwork": self.destination_network,
            "token": self.token,
            "sender": self.sender,
            "nonce": str(self.nonce.value),
            "nonceHex": self.nonce.hex,
            "data": self.data,
        }


@dataclass(frozen=True)
class DecodedTransfer:
    """Typed fields recovered from an encoded payload."""

    sender: str
    source_network: int
    destination_network: int
    token: int
    amount: str
    atomic_amount: int
    nonce: Nonce


class TransferCodec:
    """Encodes and decodes transfer payloads at a fixed token precision."""

    def __init__(
        self,
        nonce_generator: Optional[NonceGenerator] = None,
        decimals: int = DEFAULT_DECIMALS,
    ):
        self.nonce_generator = nonce_generator or NonceGenerator()
        self.decimals = decimals

    def encode(self, intent: TransferIntent) -> TransferPayload:
        """Build the canonical payload for ``intent`` with a fresh nonce.

        Raises:
            FieldOverflow: a network or token id does not fit in 32 bits, or
                the atomic amount does not fit in 256 bits.
            InvalidAmount: the amount is not a valid decimal at this precision.
        """
        source = to_hex32(intent.source_network, "source_network")
        destination = to_hex32(intent.destination_network, "destination_network")
        token = to_hex32(intent.token, "token")

        amount_hex = to_atomic_hex(intent.amount, self.decimals)
        sender = address_tail(intent.sender).rjust(SENDER_HEX_LEN, "0")
        nonce = self.nonce_generator.generate(intent.sender)

        data = "0x" + amount_hex + source + destination + token + sender + nonce.hex

        logger.debug(
            "Encoded transfer",
            extra={
                "sender": intent.sender,
                "source_network": intent.source_network,
                "destination_network": intent.destination_network,
                "token": intent.token,
            },
        )

        return TransferPayload(
            data=data,
            amount=from_atomic(int(amount_hex, 16), self.decimals),
            amount_hex=amount_hex,
            source_network=intent.source_network,
            destination_network=intent.destination_network,
            token=intent.token,
            sender=sender,
            nonce=nonce,
            decimals=self.decimals,
        )

    def decode(self, payload: Union[str, bytes, TransferPayload]) -> DecodedTransfer:
        """Parse a payload back into typed fields.

        Raises:
            PayloadFormatError: wrong length, non-hex content or a sender
                field whose padding is not zero.
        """
        text = self._payload_hex(payload)

        offset = 0

        def take(width: int) -> str:
            nonlocal offset
            chunk = text[offset:offset + width]
            offset += width
            return chunk

        amount_hex = take(AMOUNT_HEX_LEN)
        source = int(take(NETWORK_HEX_LEN), 16)
        destination = int(take(NETWORK_HEX_LEN), 16)
        token = int(take(TOKEN_HEX_LEN), 16)
        sender_field = take(SENDER_HEX_LEN)
        nonce = Nonce.from_hex(take(NONCE_HEX_LEN))

        padding = sender_field[: SENDER_HEX_LEN - 40]
        if padding.strip("0"):
            raise PayloadFormatError(
                "Sender field has non-zero padding", field="sender", value=sender_field
            )

        atomic = int(amount_hex, 16)
        return DecodedTransfer(
            sender=Web3.to_checksum_address("0x" + sender_field[-40:]),
            source_network=source,
            destination_network=destination,
            token=token,
            amount=from_atomic(atomic, self.decimals),
            atomic_amount=atomic,
            nonce=nonce,
        )

    @staticmethod
    def _payload_hex(payload: Union[str, bytes, TransferPayload]) -> str:
        if isinstance(payload, TransferPayload):
            payload = payload.data
        if isinstance(payload, (bytes, bytearray)):
            text = bytes(payload).hex()
        elif isinstance(payload, str):
            text = payload[2:] if payload[:2].lower() == "0x" else payload
        else:
            raise PayloadFormatError(
                f"Payload must be hex text or bytes, got {type(payload).__name__}"
            )

        if len(text) != PAYLOAD_HEX_LEN:
            raise PayloadFormatError(
                f"Payload must be {PAYLOAD_HEX_LEN} hex characters, got {len(text)}",
                value=len(text),
                expected=PAYLOAD_HEX_LEN,
            )
        if not set(text) <= _HEX_DIGITS:
            raise PayloadFormatError("Payload contains non-hex characters")
        return text


_default_codec = TransferCodec()


def encode_transfer(
    sender: str,
    source_network: int,
    destination_network: int,
    token: int,
    amount: Union[str, int, Decimal],
) -> TransferPayload:
    """Encode a transfer with the default 18-decimal codec."""
    intent = TransferIntent(
        sender=sender,
        source_network=source_network,
        destination_network=destination_network,
        token=token,
        amount=amount,
    )
    return _default_codec.encode(intent)


def decode_transfer(payload: Union[str, bytes, TransferPayload]) -> DecodedTransfer:
    """Decode a payload with the default 18-decimal codec."""
    return _default_codec.decode(payload)
