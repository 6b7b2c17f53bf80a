"""
Fixed-point conversion between human-readable token amounts and atomic units.

Amounts are handled with exact integer arithmetic on the digits of a
``decimal.Decimal``; no floating point value is ever involved.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from ..errors import FieldOverflow, InvalidAmount, create_overflow_error

DEFAULT_DECIMALS = 18

UINT32_MAX = 2**32 - 1
UINT256_MAX = 2**256 - 1

AmountLike = Union[str, int, Decimal]


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise InvalidAmount(
            f"Decimals must be a non-negative integer, got {decimals!r}",
            field="decimals",
            value=decimals,
        )
    return decimals


def _parse(value: AmountLike) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(
            f"Amount must be a decimal string, int or Decimal, got {type(value).__name__}",
            value=value,
        )

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmount("Amount is empty", value=value)
        try:
            parsed = Decimal(text)
        except InvalidOperation as e:
            raise InvalidAmount(f"Not a decimal numeral: {value!r}", value=value, cause=e) from e
    else:
        raise InvalidAmount(
            f"Amount must be a decimal string, int or Decimal, got {type(value).__name__}",
            value=value,
        )

    if not parsed.is_finite():
        raise InvalidAmount(f"Amount must be finite: {value!r}", value=value)
    if parsed.is_signed() and parsed != 0:
        raise InvalidAmount(f"Amount must not be negative: {value!r}", value=value)

    return parsed


def to_atomic(
    value: AmountLike,
    decimals: int = DEFAULT_DECIMALS,
    max_value: Optional[int] = None,
) -> int:
    """Convert a decimal amount to integer atomic units (``value * 10**decimals``).

    With ``max_value`` the digit count of the result is checked against it
    before any scaling, so an exponent such as ``"1e500000000"`` fails at once
    instead of building a huge integer.

    Raises:
        InvalidAmount: if ``value`` is not a finite, non-negative decimal
            numeral or has more significant fractional digits than
            ``decimals``.
        FieldOverflow: the result would exceed ``max_value``.
    """
    decimals = _check_decimals(decimals)
    parsed = _parse(value)

    _, digits, exponent = parsed.as_tuple()
    coefficient = "".join(str(d) for d in digits).lstrip("0")
    if not coefficient:
        return 0
    shift = exponent + decimals

    if shift < 0:
        coefficient, dropped = coefficient[:shift], coefficient[shift:]
        if dropped.strip("0"):
            raise InvalidAmount(
                f"Amount {value!r} has more than {decimals} fractional digits",
                value=value,
                expected=f"at most {decimals} fractional digits",
            )
        shift = 0

    if max_value is not None and len(coefficient) + shift > len(str(max_value)):
        raise create_overflow_error("amount", value, max_value.bit_length())

    atomic = int(coefficient) * 10**shift
    if max_value is not None and atomic > max_value:
        raise create_overflow_error("amount", value, max_value.bit_length())
    return atomic


def from_atomic(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Convert integer atomic units back to a canonical decimal string.

    The result has no exponent and no trailing fractional zeros, so
    ``from_atomic(to_atomic("100.5")) == "100.5"``.
    """
    decimals = _check_decimals(decimals)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(
            f"Atomic amount must be an integer, got {type(value).__name__}",
            value=value,
        )
    if value < 0:
        raise InvalidAmount(f"Atomic amount must not be negative: {value}", value=value)

    whole, fraction = divmod(value, 10**decimals)
    if fraction == 0:
        return str(whole)

    digits = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{digits}"


def to_atomic_hex(value: AmountLike, decimals: int = DEFAULT_DECIMALS) -> str:
    """Atomic amount as 64 big-endian hex characters, zero padded."""
    return format(to_atomic(value, decimals, max_value=UINT256_MAX), "064x")


def to_hex32(value: int, field: str = "value") -> str:
    """Encode an unsigned 32-bit integer as 8 hex characters.

    Out-of-range values raise ``FieldOverflow`` rather than being truncated.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldOverflow(
            f"Field '{field}' must be an integer, got {type(value).__name__}",
            field=field,
            value=value,
            width_bits=32,
        )
    if value < 0 or value > UINT32_MAX:
        raise create_overflow_error(field, value, 32)
    return format(value, "08x")
