"""crossbridge error handling.

This module provides the exception hierarchy shared by the transfer codec,
the signer and the configuration reconciler.
"""

from .exceptions import (
    CollaboratorCallFailed,
    ConfigurationError,
    CrossBridgeError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    FieldOverflow,
    InvalidAddress,
    InvalidAmount,
    PayloadFormatError,
    PrecheckFailed,
    SigningError,
    SigningProtocolError,
    SigningUnavailable,
    ValidationError,
    create_collaborator_error,
    create_overflow_error,
)

__all__ = [
    # Base
    "CrossBridgeError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    # Local validation
    "ValidationError",
    "InvalidAmount",
    "InvalidAddress",
    "FieldOverflow",
    "PayloadFormatError",
    # Signing
    "SigningError",
    "SigningUnavailable",
    "SigningProtocolError",
    # Chain
    "CollaboratorCallFailed",
    "PrecheckFailed",
    "ConfigurationError",
    # Helpers
    "create_collaborator_error",
    "create_overflow_error",
]
