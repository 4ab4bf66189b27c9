"""Tests for amount conversion and receipt helpers."""

from decimal import Decimal

import pytest
from hexbytes import HexBytes

from okx_bridge.constants import TOKENS
from okx_bridge.exceptions import InvalidAmountError, ValidationError
from okx_bridge.utils import format_units, from_base_units, serialise_receipt, to_base_units


class TestBaseUnitConversion:
    """Test decimal to base-unit conversion."""

    def test_whole_amount(self):
        assert to_base_units("1", 6) == 1_000_000

    def test_fractional_amount(self):
        assert to_base_units("1.5", 6) == 1_500_000

    def test_smallest_unit(self):
        assert to_base_units(Decimal("0.000001"), 6) == 1

    def test_eighteen_decimals(self):
        assert to_base_units("2.25", 18) == 2_250_000_000_000_000_000

    def test_large_amount_keeps_precision(self):
        assert to_base_units("123456789012.123456789012345678", 18) == (
            123456789012123456789012345678
        )

    def test_trailing_zeros_allowed(self):
        assert to_base_units("1.5000000", 6) == 1_500_000

    def test_integer_input(self):
        assert to_base_units(3, 6) == 3_000_000

    def test_excess_precision_rejected(self):
        with pytest.raises(InvalidAmountError) as excinfo:
            to_base_units("1.0000001", 6)
        assert excinfo.value.details["decimals"] == 6

    def test_invalid_amount_is_validation_error(self):
        with pytest.raises(ValidationError):
            to_base_units("abc", 6)

    @pytest.mark.parametrize("amount", ["0", "-1", "NaN", "Infinity"])
    def test_non_positive_or_non_finite_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            to_base_units(amount, 6)

    def test_float_rejected(self):
        with pytest.raises(InvalidAmountError):
            to_base_units(1.5, 6)  # type: ignore[arg-type]

    def test_from_base_units(self):
        assert from_base_units(1_500_000, 6) == Decimal("1.5")
        assert from_base_units("990000", 6) == Decimal("0.99")

    def test_format_units(self):
        assert format_units(1_500_000, 6) == "1.500000"
        assert format_units(10**18, 18) == "1.000000000000000000"


@pytest.mark.parametrize("key", sorted(TOKENS, key=lambda item: item[0].value))
@pytest.mark.parametrize("amount", ["1", "0.000001", "123.456789", "1000000"])
def test_round_trip_for_registered_tokens(key, amount):
    decimals = TOKENS[key].decimals
    assert from_base_units(to_base_units(amount, decimals), decimals) == Decimal(amount)


def test_serialise_receipt_hex_encodes_bytes():
    receipt = {
        "transactionHash": HexBytes(b"\x01\x02"),
        "logs": [{"data": b"\xff"}],
        "status": 1,
    }

    assert serialise_receipt(receipt) == {
        "transactionHash": "0x0102",
        "logs": [{"data": "0xff"}],
        "status": 1,
    }
    assert serialise_receipt(None) is None
