"""
crossbridge: cross-chain transfer signing and bridge configuration.

This package provides:
- Fixed-point amount conversion and the canonical transfer payload codec
- Transfer signing through an external signer tool or eth_account
- Idempotent reconciliation of bridge/token roles and flags
"""

__version__ = "0.1.0"

from .config import BridgeConfig, TokenSpec
from .contracts import Role, RoleGrant, TokenRegistration
from .errors import (
    CollaboratorCallFailed,
    CrossBridgeError,
    FieldOverflow,
    InvalidAmount,
    PrecheckFailed,
    SigningProtocolError,
    SigningUnavailable,
)
from .reconcile import (
    ConfigurationReconciler,
    reconcile_token,
    reconcile_token_owner,
    reconcile_validators,
)
from .signing import ExternalProcessSigner, LocalSigner, SignedTransfer, TransferSigner
from .transfer import (
    DecodedTransfer,
    Nonce,
    NonceGenerator,
    TransferCodec,
    TransferIntent,
    TransferPayload,
    decode_transfer,
    encode_transfer,
    from_atomic,
    parse_total_fees,
    parse_wrapped_token_fees,
    to_atomic,
)

__all__ = [
    "__version__",
    # Config
    "BridgeConfig",
    "TokenSpec",
    # Transfer
    "DecodedTransfer",
    "Nonce",
    "NonceGenerator",
    "TransferCodec",
    "TransferIntent",
    "TransferPayload",
    "decode_transfer",
    "encode_transfer",
    "from_atomic",
    "parse_total_fees",
    "parse_wrapped_token_fees",
    "to_atomic",
    # Signing
    "ExternalProcessSigner",
    "LocalSigner",
    "SignedTransfer",
    "TransferSigner",
    # Contracts
    "Role",
    "RoleGrant",
    "TokenRegistration",
    # Reconciliation
    "ConfigurationReconciler",
    "reconcile_token",
    "reconcile_token_owner",
    "reconcile_validators",
    # Errors
    "CrossBridgeError",
    "InvalidAmount",
    "FieldOverflow",
    "SigningUnavailable",
    "SigningProtocolError",
    "CollaboratorCallFailed",
    "PrecheckFailed",
]
