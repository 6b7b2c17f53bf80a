"""
Bridge fee tuples, converted from atomic units.

The bridge reports fees as positional tuples of unsigned integers. Token
amounts among them are converted with ``from_atomic``; the wrap and unwrap
fees of a wrapped token are plain integers and are kept as read.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Sequence, Tuple

from ..errors import InvalidAmount
from .units import DEFAULT_DECIMALS, from_atomic


@dataclass(frozen=True)
class TotalFees:
    """Fees accumulated by the bridge and the amount of FMTA burned."""

    accumulated_fee: str
    burned_fmta: str

    def to_numbers(self) -> Dict[str, Decimal]:
        return {
            "accumulated_fee": Decimal(self.accumulated_fee),
            "burned_fmta": Decimal(self.burned_fmta),
        }


@dataclass(frozen=True)
class WrappedTokenFees:
    """Per-token fees for wrapping and unwrapping.

    ``fmta_wrap_fee`` and ``fmta_unwrap_fee`` are FMTA amounts; ``wrap_fee``
    and ``unwrap_fee`` are the raw values the bridge stores.
    """

    fmta_wrap_fee: str
    fmta_unwrap_fee: str
    wrap_fee: int
    unwrap_fee: int

    def to_numbers(self) -> Dict[str, Any]:
        return {
            "fmta_wrap_fee": Decimal(self.fmta_wrap_fee),
            "fmta_unwrap_fee": Decimal(self.fmta_unwrap_fee),
            "wrap_fee": self.wrap_fee,
            "unwrap_fee": self.unwrap_fee,
        }


def _unpack(fees: Any, count: int, name: str) -> Tuple[int, ...]:
    if isinstance(fees, (str, bytes)) or not isinstance(fees, Sequence) or len(fees) < count:
        raise InvalidAmount(
            f"{name} must be a sequence of at least {count} integers, got {fees!r}",
            field=name,
            value=fees,
        )

    values = tuple(fees[:count])
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidAmount(
                f"{name} entries must be non-negative integers, got {value!r}",
                field=name,
                value=fees,
            )
    return values


def parse_total_fees(fees: Sequence[int], decimals: int = DEFAULT_DECIMALS) -> TotalFees:
    """Parse ``(accumulatedFee, burnedFmta)`` as read from the bridge."""
    accumulated, burned = _unpack(fees, 2, "total_fees")
    return TotalFees(
        accumulated_fee=from_atomic(accumulated, decimals),
        burned_fmta=from_atomic(burned, decimals),
    )


def parse_wrapped_token_fees(
    fees: Sequence[int], decimals: int = DEFAULT_DECIMALS
) -> WrappedTokenFees:
    """Parse ``(fmtaWrapFee, fmtaUnwrapFee, wrapFee, unwrapFee)``."""
    fmta_wrap, fmta_unwrap, wrap, unwrap = _unpack(fees, 4, "wrapped_token_fees")
    return WrappedTokenFees(
        fmta_wrap_fee=from_atomic(fmta_wrap, decimals),
        fmta_unwrap_fee=from_atomic(fmta_unwrap, decimals),
        wrap_fee=wrap,
        unwrap_fee=unwrap,
    )
