"""
Unit tests for bridge fee parsing.
"""

from decimal import Decimal

import pytest

from crossbridge.errors import InvalidAmount
from crossbridge.transfer import (
    TotalFees,
    WrappedTokenFees,
    parse_total_fees,
    parse_wrapped_token_fees,
)


class TestTotalFees:
    """Test parsing of the bridge's total fee tuple."""

    def test_parse(self):
        """Test atomic fee amounts become canonical decimal strings."""
        fees = parse_total_fees((1_500_000_000_000_000_000, 25 * 10**16))

        assert fees == TotalFees(accumulated_fee="1.5", burned_fmta="0.25")

    def test_list_and_extra_entries(self):
        """Test a list result with trailing entries uses the first two."""
        fees = parse_total_fees([10**18, 0, 99])

        assert fees.accumulated_fee == "1"
        assert fees.burned_fmta == "0"

    def test_custom_decimals(self):
        """Test parsing at a token precision other than 18."""
        assert parse_total_fees((125, 5), decimals=2) == TotalFees("1.25", "0.05")

    def test_to_numbers(self):
        """Test the numeric view is exact."""
        numbers = parse_total_fees((1, 10**18)).to_numbers()

        assert numbers == {
            "accumulated_fee": Decimal("0.000000000000000001"),
            "burned_fmta": Decimal(1),
        }

    @pytest.mark.parametrize("fees", [(), (1,), "12", None, (1, -1), (1, "2"), (True, 1)])
    def test_malformed(self, fees):
        """Test short, non-integer or negative tuples are rejected."""
        with pytest.raises(InvalidAmount) as exc_info:
            parse_total_fees(fees)

        assert exc_info.value.field == "total_fees"


class TestWrappedTokenFees:
    """Test parsing of a wrapped token's fee tuple."""

    def test_parse(self):
        """Test FMTA amounts are converted and raw fees kept."""
        fees = parse_wrapped_token_fees((2 * 10**18, 5 * 10**17, 30, 45))

        assert fees == WrappedTokenFees(
            fmta_wrap_fee="2",
            fmta_unwrap_fee="0.5",
            wrap_fee=30,
            unwrap_fee=45,
        )

    def test_to_numbers(self):
        """Test the numeric view keeps raw fees as integers."""
        numbers = parse_wrapped_token_fees((10**18, 0, 7, 8)).to_numbers()

        assert numbers["fmta_wrap_fee"] == Decimal(1)
        assert numbers["fmta_unwrap_fee"] == Decimal(0)
        assert numbers["wrap_fee"] == 7
        assert numbers["unwrap_fee"] == 8

    def test_too_short(self):
        """Test a tuple missing the raw fees."""
        with pytest.raises(InvalidAmount) as exc_info:
            parse_wrapped_token_fees((1, 2, 3))

        assert exc_info.value.field == "wrapped_token_fees"
