"""Transfer request construction: fixed-point amounts, nonces and the wire codec."""

from .codec import (
    PAYLOAD_BYTES,
    PAYLOAD_HEX_LEN,
    DecodedTransfer,
    TransferCodec,
    TransferIntent,
    TransferPayload,
    decode_transfer,
    encode_transfer,
    normalize_address,
)
from .fees import TotalFees, WrappedTokenFees, parse_total_fees, parse_wrapped_token_fees
from .nonce import Nonce, NonceGenerator, address_tail, generate_nonce
from .units import (
    DEFAULT_DECIMALS,
    UINT32_MAX,
    UINT256_MAX,
    from_atomic,
    to_atomic,
    to_atomic_hex,
    to_hex32,
)

__all__ = [
    # Units
    "DEFAULT_DECIMALS",
    "UINT32_MAX",
    "UINT256_MAX",
    "from_atomic",
    "to_atomic",
    "to_atomic_hex",
    "to_hex32",
    # Fees
    "TotalFees",
    "WrappedTokenFees",
    "parse_total_fees",
    "parse_wrapped_token_fees",
    # Nonce
    "Nonce",
    "NonceGenerator",
    "address_tail",
    "generate_nonce",
    # Codec
    "PAYLOAD_BYTES",
    "PAYLOAD_HEX_LEN",
    "DecodedTransfer",
    "TransferCodec",
    "TransferIntent",
    "TransferPayload",
    "decode_transfer",
    "encode_transfer",
    "normalize_address",
]
