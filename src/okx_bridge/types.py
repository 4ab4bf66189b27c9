"""Type definitions and data models for the OKX USDC bridge."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from web3 import Web3
from web3.types import TxParams

from .exceptions import ValidationError


class Chain(str, Enum):
    """Networks known to the bridge registry."""

    BASE = "base"
    ARBITRUM = "arbitrum"
    BSC = "bsc"
    POLYGON = "polygon"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Chain | str) -> Chain:
        if isinstance(value, Chain):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown chain: {value}") from None


class BridgeStatus(str, Enum):
    """Lifecycle states of a submitted bridge transfer."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ChainDescriptor:
    chain_id: str
    chain_index: str
    name: str
    rpc_url: str
    explorer_url: str

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"


@dataclass(frozen=True)
class TokenDescriptor:
    address: str
    decimals: int
    symbol: str


@dataclass(frozen=True)
class BridgeRoute:
    """Per-destination parameters of the Base bridge flow."""

    destination: Chain
    default_slippage: str
    extra_spenders: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuoteRequest:
    """Parameters shared by the quote and build-tx endpoints."""

    source_chain: ChainDescriptor
    dest_chain: ChainDescriptor
    source_token: TokenDescriptor
    dest_token: TokenDescriptor
    amount: str
    slippage: str
    wallet_address: str
    sort: int = 1
    fee_percent: str | None = None
    referrer: str | None = None

    def to_params(self, *, include_chain_ids: bool = False) -> dict[str, str | int | None]:
        """Return the aggregator query parameters in their canonical order."""

        params: dict[str, str | int | None] = {
            "fromChainIndex": self.source_chain.chain_index,
            "toChainIndex": self.dest_chain.chain_index,
        }
        if include_chain_ids:
            params["fromChainId"] = self.source_chain.chain_id
            params["toChainId"] = self.dest_chain.chain_id
        params.update(
            {
                "fromTokenAddress": self.source_token.address,
                "toTokenAddress": self.dest_token.address,
                "amount": self.amount,
                "slippage": self.slippage,
                "userWalletAddress": self.wallet_address,
                "sort": self.sort,
                "feePercent": self.fee_percent,
                "referrerAddress": self.referrer,
            }
        )
        return params


@dataclass(frozen=True)
class TransactionPayload:
    """Executable transaction produced by the build-tx endpoint."""

    to: str
    data: str
    value: int = 0
    gas_limit: int | None = None
    gas_price: int | None = None
    max_priority_fee_per_gas: int | None = None
    max_fee_per_gas: int | None = None
    sender: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TransactionPayload:
        to = data.get("to")
        if not to:
            raise ValidationError("Transaction payload is missing 'to'", field="tx.to", value=to)

        return cls(
            to=str(to),
            data=str(data.get("data") or "0x"),
            value=_to_int(data.get("value")) or 0,
            gas_limit=_to_int(data.get("gasLimit")),
            gas_price=_to_int(data.get("gasPrice")),
            max_priority_fee_per_gas=_to_int(data.get("maxPriorityFeePerGas")),
            max_fee_per_gas=_to_int(data.get("maxFeePerGas")),
            sender=data.get("from") or None,
        )

    @property
    def is_eip1559(self) -> bool:
        return self.max_priority_fee_per_gas is not None

    def fee_fields(self) -> dict[str, int]:
        """Return fee fields; a priority fee switches the payload to EIP-1559."""

        if self.max_priority_fee_per_gas is not None:
            # the aggregator's gasPrice doubles as the fee cap when no maxFeePerGas is sent
            max_fee = self.max_fee_per_gas if self.max_fee_per_gas is not None else self.gas_price
            fields = {"maxPriorityFeePerGas": self.max_priority_fee_per_gas}
            if max_fee is not None:
                fields["maxFeePerGas"] = max_fee
            return fields

        if self.gas_price is None:
            return {}
        return {"gasPrice": self.gas_price}

    def to_tx_params(self, sender: str, chain_id: int) -> TxParams:
        tx: dict[str, Any] = {
            "from": Web3.to_checksum_address(sender),
            "to": Web3.to_checksum_address(self.to),
            "data": self.data,
            "value": self.value,
            "chainId": chain_id,
        }
        if self.gas_limit:
            tx["gas"] = self.gas_limit
        tx.update(self.fee_fields())
        return tx  # type: ignore[return-value]


@dataclass(frozen=True)
class RouteOption:
    """One candidate bridge path returned by the aggregator."""

    bridge_name: str
    expected_output_amount: str
    minimum_output_amount: str
    bridge_id: int | None = None
    cross_chain_fee: str = "0"
    native_fee: str = "0"
    estimated_seconds: int | None = None
    from_amount: str | None = None
    from_chain_id: str | None = None
    to_chain_id: str | None = None
    transaction: TransactionPayload | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_quote_entry(cls, entry: Mapping[str, Any]) -> list[RouteOption]:
        """Expand a quote entry, accepting both ``routerList`` and ``router`` layouts."""

        router_list = entry.get("routerList")
        if isinstance(router_list, list) and router_list:
            return [
                cls._from_parts(entry, item, item.get("router") or {})
                for item in router_list
                if isinstance(item, Mapping)
            ]

        router = entry.get("router")
        if isinstance(router, Mapping):
            return [cls._from_parts(entry, entry, router)]

        return []

    @classmethod
    def from_build_entry(cls, entry: Mapping[str, Any]) -> RouteOption:
        router = entry.get("router")
        if not isinstance(router, Mapping):
            raise ValidationError(
                "Build response entry is missing router details", field="router", value=router
            )

        tx = entry.get("tx")
        if not isinstance(tx, Mapping):
            raise ValidationError(
                "Build response entry is missing a transaction payload", field="tx", value=tx
            )

        option = cls._from_parts(entry, entry, router)
        return cls(
            bridge_name=option.bridge_name,
            expected_output_amount=option.expected_output_amount,
            minimum_output_amount=option.minimum_output_amount,
            bridge_id=option.bridge_id,
            cross_chain_fee=option.cross_chain_fee,
            native_fee=option.native_fee,
            estimated_seconds=option.estimated_seconds,
            from_amount=option.from_amount,
            from_chain_id=option.from_chain_id,
            to_chain_id=option.to_chain_id,
            transaction=TransactionPayload.from_dict(tx),
            raw=entry,
        )

    @classmethod
    def _from_parts(
        cls,
        entry: Mapping[str, Any],
        route: Mapping[str, Any],
        router: Mapping[str, Any],
    ) -> RouteOption:
        return cls(
            bridge_name=str(router.get("bridgeName") or "unknown"),
            expected_output_amount=str(route.get("toTokenAmount") or "0"),
            minimum_output_amount=str(
                route.get("minimumReceive") or route.get("minimumReceived") or "0"
            ),
            bridge_id=_lenient_int(router.get("bridgeId")),
            cross_chain_fee=str(router.get("crossChainFee") or "0"),
            native_fee=str(router.get("otherNativeFee") or "0"),
            estimated_seconds=_lenient_int(route.get("estimateTime")),
            from_amount=_optional_str(entry.get("fromTokenAmount")),
            from_chain_id=_optional_str(entry.get("fromChainId") or entry.get("fromChainIndex")),
            to_chain_id=_optional_str(entry.get("toChainId") or entry.get("toChainIndex")),
            raw=entry,
        )


@dataclass(frozen=True)
class BridgeEstimate:
    from_amount: str
    to_amount: str
    minimum_receive: str
    bridge_name: str
    estimated_time: str
    cross_chain_fee: str
    native_fee: str

    @classmethod
    def from_route(cls, from_amount: str, route: RouteOption) -> BridgeEstimate:
        seconds = route.estimated_seconds
        return cls(
            from_amount=route.from_amount or from_amount,
            to_amount=route.expected_output_amount,
            minimum_receive=route.minimum_output_amount,
            bridge_name=route.bridge_name,
            estimated_time=f"{seconds} seconds" if seconds is not None else "Unknown",
            cross_chain_fee=route.cross_chain_fee,
            native_fee=route.native_fee,
        )


@dataclass(frozen=True)
class StatusRecord:
    """Aggregator answer to a status lookup; ``raw`` is the untouched envelope."""

    chain_id: str
    tx_hash: str
    status: str | None = None
    cross_chain_result: Mapping[str, Any] | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_envelope(
        cls, envelope: Mapping[str, Any], chain_id: str, tx_hash: str
    ) -> StatusRecord:
        data = envelope.get("data")
        first: Mapping[str, Any] = {}
        if isinstance(data, list) and data and isinstance(data[0], Mapping):
            first = data[0]

        cross_chain = first.get("crossChainResult")
        return cls(
            chain_id=str(first.get("chainId") or chain_id),
            tx_hash=str(first.get("txHash") or tx_hash),
            status=_optional_str(first.get("status")),
            cross_chain_result=cross_chain if isinstance(cross_chain, Mapping) else None,
            raw=envelope,
        )


@dataclass(frozen=True)
class SubmittedTransaction:
    """A confirmed on-chain write."""

    tx_hash: str
    block_number: int | None
    status: int | None
    receipt: Any = field(default=None, repr=False)


@dataclass
class BridgeResult:
    tx_hash: str
    from_chain: str
    to_chain: str
    from_token: str
    to_token: str
    amount: str
    status: BridgeStatus = BridgeStatus.PENDING
    timestamp: int = 0
    explorer_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "txHash": self.tx_hash,
            "fromChain": self.from_chain,
            "toChain": self.to_chain,
            "fromToken": self.from_token,
            "toToken": self.to_token,
            "amount": self.amount,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("Boolean is not a valid integer field", value=value)
    if isinstance(value, int):
        return value

    text = str(value).strip()
    try:
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    except ValueError as exc:
        raise ValidationError("Expected an integer field", value=value) from exc


def _lenient_int(value: Any) -> int | None:
    try:
        return _to_int(value)
    except ValidationError:
        return None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
