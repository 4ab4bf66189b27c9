"""Base -> destination USDC bridging through the OKX cross-chain aggregator."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any

from .api import OKXDexClient
from .config import BridgeClientConfig
from .constants import (
    APPROVAL_MULTIPLIER,
    DEFAULT_SLIPPAGE,
    ESTIMATED_GAS_LIMIT,
    FALLBACK_GAS_PRICE,
    GAS_SAFETY_MULTIPLIER,
    OKX_AGGREGATOR,
    OPTIMAL_ROUTE,
    SOURCE_CHAIN,
    STARGATE_SPENDER,
    get_bridge_route,
)
from .evm import BalanceReader, TransactionDispatcher, Web3Connections
from .exceptions import InsufficientBalanceError, InsufficientGasError, ValidationError
from .registry import ChainRegistry
from .types import (
    BridgeEstimate,
    BridgeResult,
    BridgeRoute,
    BridgeStatus,
    Chain,
    QuoteRequest,
    RouteOption,
    StatusRecord,
    TokenDescriptor,
)
from .utils import format_units, from_base_units, to_base_units

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18

RoutePredicate = Callable[[RouteOption], bool]


def avoid_bridge(name: str) -> RoutePredicate:
    """Return a predicate accepting routes whose bridge name does not contain ``name``."""

    needle = name.lower()

    def predicate(option: RouteOption) -> bool:
        return needle not in option.bridge_name.lower()

    return predicate


AVOID_ACROSS = avoid_bridge("across")


def select_route(
    options: Sequence[RouteOption], prefer: RoutePredicate = AVOID_ACROSS
) -> RouteOption:
    """Pick one route: the only option, else the first preferred one, else the first."""

    if not options:
        raise ValidationError("No bridge transaction data received", field="data", value=[])

    chosen = options[0]
    if len(options) > 1:
        alternative = next((option for option in options if prefer(option)), None)
        if alternative is not None and alternative is not chosen:
            logger.info(
                "Using alternative bridge: %s instead of %s",
                alternative.bridge_name,
                chosen.bridge_name,
            )
            chosen = alternative
    return chosen


class BridgeService:
    """Drive one bridge operation end-to-end from Base to a supported destination."""

    def __init__(
        self,
        config: BridgeClientConfig,
        api: OKXDexClient,
        reader: BalanceReader,
        dispatcher: TransactionDispatcher,
        *,
        registry: ChainRegistry | None = None,
        connections: Web3Connections | None = None,
        route_preference: RoutePredicate = AVOID_ACROSS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._api = api
        self._reader = reader
        self._dispatcher = dispatcher
        self._registry = registry or ChainRegistry.from_config(config)
        self._connections = connections
        self._route_preference = route_preference
        self._sleep = sleep
        self._clock = clock
        self._wallet = config.wallet.address

    @classmethod
    def from_config(cls, config: BridgeClientConfig) -> BridgeService:
        """Wire the production API client, Web3 connections and dispatcher."""

        registry = ChainRegistry.from_config(config)
        connections = Web3Connections(config, registry)
        connections.connect()
        return cls(
            config,
            OKXDexClient(config.credentials, request_timeout=config.request_timeout),
            BalanceReader(connections),
            TransactionDispatcher(connections, receipt_timeout=config.receipt_timeout),
            registry=registry,
            connections=connections,
        )

    @property
    def registry(self) -> ChainRegistry:
        return self._registry

    def close(self) -> None:
        if self._connections is not None:
            self._connections.disconnect()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------
    def execute_bridge(
        self,
        destination: Chain | str,
        amount: str,
        *,
        slippage: str | None = None,
        referrer: str | None = None,
        fee_percent: str | None = None,
    ) -> BridgeResult:
        route = get_bridge_route(destination)
        source = self._registry.chain(SOURCE_CHAIN)
        dest = self._registry.chain(route.destination)
        source_token = self._registry.token(SOURCE_CHAIN)
        dest_token = self._registry.token(route.destination)

        logger.info(
            "Starting bridge of %s %s from %s to %s",
            amount,
            source_token.symbol,
            source.name,
            dest.name,
        )

        self._check_gas()

        amount_units = to_base_units(amount, source_token.decimals)
        request = self._build_request(
            route,
            amount_units,
            slippage=slippage,
            referrer=referrer,
            fee_percent=fee_percent or self._config.fee_percent,
        )

        logger.debug("Stage bridge [%s]: fetch build data", dest.name)
        if self._config.quote_delay > 0:
            logger.info("Waiting %.1f seconds for fresh quote...", self._config.quote_delay)
            self._sleep(self._config.quote_delay)
        options = self._api.build_transaction(request)
        self._log_options(options, dest_token)

        selected = select_route(options, self._route_preference)
        self._validate_build(request, selected)

        payload = selected.transaction
        if payload is None:
            raise ValidationError(
                "Selected route has no transaction payload",
                field="tx",
                value=selected.bridge_name,
            )

        logger.info(
            "Bridge: %s, expected to receive %s %s on %s",
            selected.bridge_name,
            _display_units(selected.expected_output_amount, dest_token.decimals),
            dest_token.symbol,
            dest.name,
        )

        logger.debug("Stage bridge [%s]: ensure allowances", dest.name)
        for spender in _unique_spenders(payload.to, route.extra_spenders):
            self._ensure_allowance(amount_units, spender, source_token)

        logger.debug("Stage bridge [%s]: submit transaction", dest.name)
        submitted = self._dispatcher.send_payload(SOURCE_CHAIN, payload)

        logger.debug("Stage bridge [%s]: complete (tx=%s)", dest.name, submitted.tx_hash)
        return BridgeResult(
            tx_hash=submitted.tx_hash,
            from_chain=source.name,
            to_chain=dest.name,
            from_token=source_token.symbol,
            to_token=dest_token.symbol,
            amount=str(amount),
            status=BridgeStatus.PENDING,
            timestamp=int(self._clock() * 1000),
            explorer_url=source.tx_url(submitted.tx_hash),
        )

    def estimate_bridge(
        self,
        destination: Chain | str,
        amount: str,
        *,
        slippage: str | None = None,
    ) -> BridgeEstimate:
        route = get_bridge_route(destination)
        source_token = self._registry.token(SOURCE_CHAIN)
        amount_units = to_base_units(amount, source_token.decimals)
        request = self._build_request(route, amount_units, slippage=slippage)
        return self._api.estimate_bridge(request)

    def check_transaction_status(self, tx_hash: str) -> StatusRecord:
        source = self._registry.chain(SOURCE_CHAIN)
        return self._api.get_status(source.chain_id, tx_hash)

    def list_supported_bridges(self) -> dict[str, Any]:
        return self._api.list_supported_bridges()

    def list_supported_chains(self) -> dict[str, Any]:
        return self._api.list_supported_chains()

    def get_balances(self, chains: Iterable[Chain] | None = None) -> dict[Chain, Decimal]:
        balances: dict[Chain, Decimal] = {}
        for chain in chains or self._registry.chains():
            token = self._registry.token(chain)
            units = self._reader.token_balance(chain, self._wallet, token.symbol)
            balances[chain] = from_base_units(units, token.decimals)
        return balances

    def get_allowances(self, spenders: Iterable[str] | None = None) -> dict[str, Decimal]:
        token = self._registry.token(SOURCE_CHAIN)
        allowances: dict[str, Decimal] = {}
        for spender in spenders or (OKX_AGGREGATOR, STARGATE_SPENDER):
            units = self._reader.allowance(SOURCE_CHAIN, self._wallet, spender, token.symbol)
            allowances[spender] = from_base_units(units, token.decimals)
        return allowances

    # ------------------------------------------------------------------
    # Internal workflow
    # ------------------------------------------------------------------
    def _build_request(
        self,
        route: BridgeRoute,
        amount_units: int,
        *,
        slippage: str | None = None,
        referrer: str | None = None,
        fee_percent: str | None = None,
    ) -> QuoteRequest:
        return QuoteRequest(
            source_chain=self._registry.chain(SOURCE_CHAIN),
            dest_chain=self._registry.chain(route.destination),
            source_token=self._registry.token(SOURCE_CHAIN),
            dest_token=self._registry.token(route.destination),
            amount=str(amount_units),
            slippage=slippage
            or self._config.default_slippage
            or route.default_slippage
            or DEFAULT_SLIPPAGE,
            wallet_address=self._wallet,
            sort=OPTIMAL_ROUTE,
            fee_percent=fee_percent,
            referrer=referrer,
        )

    def _check_gas(self) -> None:
        balance = self._reader.native_balance(SOURCE_CHAIN, self._wallet)
        gas_price = self._reader.gas_price(SOURCE_CHAIN)
        if not gas_price:
            logger.warning("Node reported no gas price; assuming %s wei", FALLBACK_GAS_PRICE)
            gas_price = FALLBACK_GAS_PRICE

        estimated_cost = ESTIMATED_GAS_LIMIT * gas_price
        required = estimated_cost * GAS_SAFETY_MULTIPLIER
        logger.info(
            "Gas estimation: limit=%s price=%s gwei cost=%s available=%s",
            ESTIMATED_GAS_LIMIT,
            format_units(gas_price, 9),
            format_units(estimated_cost, NATIVE_DECIMALS),
            format_units(balance, NATIVE_DECIMALS),
        )

        if balance < required:
            raise InsufficientGasError(
                "Insufficient native balance for gas fees. "
                f"Need ~{format_units(estimated_cost, NATIVE_DECIMALS)} plus safety margin, "
                f"have {format_units(balance, NATIVE_DECIMALS)}",
                required=required,
                available=balance,
            )

    def _validate_build(self, request: QuoteRequest, route: RouteOption) -> None:
        checks = (
            ("fromChainId", request.source_chain.chain_id, route.from_chain_id),
            ("toChainId", request.dest_chain.chain_id, route.to_chain_id),
            ("amount", request.amount, route.from_amount),
        )
        for field_name, expected, echoed in checks:
            if echoed is not None and echoed != expected:
                raise ValidationError(
                    f"Build response {field_name} mismatch: got {echoed}, expected {expected}",
                    field=field_name,
                    value=echoed,
                    details={"expected": expected, "bridge": route.bridge_name},
                )

    def _ensure_allowance(self, amount_units: int, spender: str, token: TokenDescriptor) -> None:
        current = self._reader.allowance(SOURCE_CHAIN, self._wallet, spender, token.symbol)
        logger.info(
            "Current allowance for %s: %s %s",
            spender,
            format_units(current, token.decimals),
            token.symbol,
        )

        balance = self._reader.token_balance(SOURCE_CHAIN, self._wallet, token.symbol)
        if balance < amount_units:
            raise InsufficientBalanceError(
                f"Insufficient {token.symbol} balance. "
                f"Required: {format_units(amount_units, token.decimals)}, "
                f"Available: {format_units(balance, token.decimals)}",
                required=amount_units,
                available=balance,
            )

        approval_amount = amount_units * APPROVAL_MULTIPLIER
        logger.info(
            "Approving %s %s (%sx buffer) for %s",
            format_units(approval_amount, token.decimals),
            token.symbol,
            APPROVAL_MULTIPLIER,
            spender,
        )
        self._dispatcher.approve(SOURCE_CHAIN, spender, approval_amount, token.symbol)

        updated = self._reader.allowance(SOURCE_CHAIN, self._wallet, spender, token.symbol)
        logger.info("New allowance: %s %s", format_units(updated, token.decimals), token.symbol)

    def _log_options(self, options: Sequence[RouteOption], token: TokenDescriptor) -> None:
        logger.info("Available bridge options:")
        for index, option in enumerate(options, start=1):
            logger.info(
                "  %s. %s - Min Receive: %s %s",
                index,
                option.bridge_name,
                _display_units(option.minimum_output_amount, token.decimals),
                token.symbol,
            )


def _unique_spenders(primary: str, extras: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    spenders: list[str] = []
    for spender in (primary, *extras):
        key = spender.lower()
        if key not in seen:
            seen.add(key)
            spenders.append(spender)
    return spenders


def _display_units(value: str, decimals: int) -> str:
    try:
        return format_units(value, decimals)
    except ValueError:
        return "N/A"
