"""Transfer signing through pluggable signing primitives."""

from .external import DEFAULT_SIGNER_TOOL, ExternalProcessSigner, redact
from .local import LocalSigner
from .signer import SignedTransfer, SigningPrimitive, TransferSigner, parse_signing_result

__all__ = [
    "DEFAULT_SIGNER_TOOL",
    "ExternalProcessSigner",
    "LocalSigner",
    "SignedTransfer",
    "SigningPrimitive",
    "TransferSigner",
    "parse_signing_result",
    "redact",
]
