"""Utility functions for the OKX USDC bridge."""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from hexbytes import HexBytes

from .exceptions import InvalidAmountError


def to_base_units(amount: str | Decimal | int, decimals: int) -> int:
    """Convert a decimal token amount to integer base units.

    Amounts with more fractional digits than ``decimals`` are rejected
    rather than rounded.
    """
    if isinstance(amount, float):
        raise InvalidAmountError(
            "Amount must be given as a string, int or Decimal", field="amount", value=amount
        )

    try:
        quantity = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (ValueError, InvalidOperation) as exc:
        raise InvalidAmountError(
            "Invalid token amount", field="amount", value=amount, details={"error": str(exc)}
        ) from exc

    if not quantity.is_finite():
        raise InvalidAmountError("Amount must be finite", field="amount", value=amount)

    if quantity <= 0:
        raise InvalidAmountError("Amount must be positive", field="amount", value=amount)

    with localcontext() as ctx:
        ctx.prec = max(28, len(quantity.as_tuple().digits) + decimals + 2)
        scaled = quantity.scaleb(decimals)
        integral = scaled.to_integral_value()

    if integral != scaled:
        raise InvalidAmountError(
            f"Amount has more than {decimals} decimal places",
            field="amount",
            value=amount,
            details={"decimals": decimals},
        )

    return int(integral)


def from_base_units(units: int | str, decimals: int) -> Decimal:
    """Convert integer base units back to a Decimal token amount."""
    with localcontext() as ctx:
        ctx.prec = max(28, len(str(units)) + decimals + 2)
        return Decimal(int(units)).scaleb(-decimals)


def format_units(units: int | str, decimals: int) -> str:
    """Render base units as a plain decimal string (no exponent)."""
    return format(from_base_units(units, decimals), "f")


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
