"""Exception hierarchy for crossbridge.

Errors raised by the transfer codec, the signer and the configuration
reconciler. Each one names the field, address or step it concerns so an
operator can decide whether a rerun is safe.

Subclasses list their extra attributes in ``details``; ``to_dict`` emits
them after the common fields. Attributes in ``stringified`` are rendered
with ``str`` because they may hold arbitrary user input.
"""

import time
import traceback
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorSeverity(Enum):
    """How urgently an operator must act."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Which layer an error comes from."""

    VALIDATION = "validation"
    ENCODING = "encoding"
    SIGNING = "signing"
    COLLABORATOR = "collaborator"
    PRECONDITION = "precondition"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Where an error happened."""

    timestamp: float = field(default_factory=time.time)
    component: Optional[str] = None
    operation: Optional[str] = None
    address: Optional[str] = None
    token_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CrossBridgeError(Exception):
    """Base exception for all crossbridge errors."""

    details: Tuple[str, ...] = ()
    stringified: Tuple[str, ...] = ()

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        self.retryable = retryable
        self.metadata = dict(metadata or {})
        self.timestamp = time.time()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "retryable": self.retryable,
            "context": self.context.to_dict(),
            "cause": None if self.cause is None else str(self.cause),
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }
        for name in self.details:
            value = getattr(self, name)
            if name in self.stringified and value is not None:
                value = str(value)
            data[name] = value
        return data

    def __str__(self) -> str:
        text = f"{type(self).__name__}: {self.message}"
        if self.error_code:
            text += f" | Code: {self.error_code}"
        if self.severity is not ErrorSeverity.MEDIUM:
            text += f" | Severity: {self.severity.value}"
        if self.category is not ErrorCategory.SYSTEM:
            text += f" | Category: {self.category.value}"
        if self.retryable:
            text += " | Retryable: Yes"
        return text


class ValidationError(CrossBridgeError):
    """Local input was rejected before anything was sent."""

    details = ("field", "value", "expected")
    stringified = ("value", "expected")

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected


class InvalidAmount(ValidationError):
    """Amount is not a valid non-negative decimal numeral at the given precision."""

    def __init__(self, message: str, value: Optional[Any] = None, **kwargs):
        kwargs.setdefault("field", "amount")
        super().__init__(message, value=value, error_code="INVALID_AMOUNT", **kwargs)


class InvalidAddress(ValidationError):
    """Address is not a 20-byte hex address."""

    def __init__(self, message: str, value: Optional[Any] = None, **kwargs):
        kwargs.setdefault("field", "sender")
        super().__init__(message, value=value, error_code="INVALID_ADDRESS", **kwargs)


class FieldOverflow(ValidationError):
    """A numeric field does not fit in its fixed wire width."""

    details = ValidationError.details + ("width_bits",)

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        width_bits: Optional[int] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.ENCODING)
        super().__init__(
            message,
            field=field,
            value=value,
            expected=f"unsigned {width_bits}-bit integer" if width_bits else None,
            error_code="FIELD_OVERFLOW",
            **kwargs,
        )
        self.width_bits = width_bits


class PayloadFormatError(ValidationError):
    """Encoded transfer payload does not match the fixed layout."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("field", "payload")
        kwargs.setdefault("category", ErrorCategory.ENCODING)
        super().__init__(message, error_code="PAYLOAD_FORMAT", **kwargs)


class SigningError(CrossBridgeError):
    """The signing primitive failed. Never retried automatically."""

    details = ("tool",)

    def __init__(self, message: str, tool: Optional[str] = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, category=ErrorCategory.SIGNING, retryable=False, **kwargs)
        self.tool = tool


class SigningUnavailable(SigningError):
    """The signing primitive could not be invoked or reported failure."""

    details = SigningError.details + ("exit_code", "stderr")

    def __init__(
        self,
        message: str,
        tool: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        super().__init__(message, tool=tool, error_code="SIGNING_UNAVAILABLE", **kwargs)
        self.exit_code = exit_code
        self.stderr = stderr


class SigningProtocolError(SigningError):
    """The signing primitive returned output that could not be parsed."""

    details = SigningError.details + ("output",)

    def __init__(self, message: str, tool: Optional[str] = None, output: Optional[str] = None, **kwargs):
        super().__init__(message, tool=tool, error_code="SIGNING_PROTOCOL", **kwargs)
        self.output = output


class CollaboratorCallFailed(CrossBridgeError):
    """A chain query or mutation failed.

    Reconciliation re-checks state before every write, so rerunning after
    this error resumes from wherever the previous pass stopped.
    """

    details = ("operation", "address", "step", "token_id")

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        address: Optional[str] = None,
        step: Optional[str] = None,
        token_id: Optional[int] = None,
        **kwargs,
    ):
        if "context" not in kwargs:
            kwargs["context"] = ErrorContext(
                component="collaborator",
                operation=operation,
                address=address,
                token_id=token_id,
            )
        super().__init__(
            message,
            error_code="COLLABORATOR_CALL_FAILED",
            category=ErrorCategory.COLLABORATOR,
            retryable=True,
            **kwargs,
        )
        self.operation = operation
        self.address = address
        self.step = step
        self.token_id = token_id


class PrecheckFailed(CrossBridgeError):
    """An ordering precondition (such as pause state) blocks a step."""

    details = ("step", "precondition", "address")

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        precondition: Optional[str] = None,
        address: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(
            message,
            error_code="PRECHECK_FAILED",
            category=ErrorCategory.PRECONDITION,
            **kwargs,
        )
        self.step = step
        self.precondition = precondition
        self.address = address


class ConfigurationError(CrossBridgeError):
    """Settings or a deployment file are missing or inconsistent."""

    details = ("config_key", "config_value")
    stringified = ("config_value",)

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
        self.config_key = config_key
        self.config_value = config_value


def create_overflow_error(field: str, value: Any, width_bits: int) -> FieldOverflow:
    return FieldOverflow(
        f"Field '{field}' value {value} does not fit in {width_bits} bits",
        field=field,
        value=value,
        width_bits=width_bits,
    )


def create_collaborator_error(
    operation: str,
    address: Optional[str],
    cause: Exception,
    step: Optional[str] = None,
    token_id: Optional[int] = None,
) -> CollaboratorCallFailed:
    """Wrap an adapter or RPC exception raised during ``operation``."""
    where = f" on {address}" if address else ""
    return CollaboratorCallFailed(
        f"Call '{operation}'{where} failed: {cause}",
        operation=operation,
        address=address,
        step=step,
        token_id=token_id,
        cause=cause,
    )
