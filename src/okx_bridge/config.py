"""Configuration containers for the OKX bridge client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .constants import (
    DEFAULT_FEE_PERCENT,
    DEFAULT_QUOTE_DELAY,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    OKX_BASE_URL,
)
from .exceptions import ConfigurationError
from .types import Chain

REQUIRED_ENV = (
    "OKX_API_KEY",
    "OKX_SECRET_KEY",
    "OKX_PASSPHRASE",
    "EVM_WALLET_ADDRESS",
    "EVM_PRIVATE_KEY",
)


@dataclass(frozen=True)
class AggregatorCredentials:
    """API credentials used to sign aggregator requests."""

    api_key: str
    secret_key: str = field(repr=False)
    passphrase: str = field(repr=False)
    base_url: str = OKX_BASE_URL


@dataclass(frozen=True)
class WalletConfig:
    address: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class ChainOverride:
    """Optional replacements for the static registry entry of one chain."""

    chain_id: str | None = None
    usdc_address: str | None = None
    rpc_url: str | None = None

    def is_empty(self) -> bool:
        return self.chain_id is None and self.usdc_address is None and self.rpc_url is None


@dataclass(frozen=True)
class BridgeClientConfig:
    """Aggregated configuration handed to every bridge component."""

    credentials: AggregatorCredentials
    wallet: WalletConfig
    default_slippage: str | None = None
    fee_percent: str | None = DEFAULT_FEE_PERCENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    quote_delay: float = DEFAULT_QUOTE_DELAY
    chain_overrides: Mapping[Chain, ChainOverride] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BridgeClientConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If a required variable is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV if not env.get(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing=missing,
            )

        overrides: dict[Chain, ChainOverride] = {}
        for chain in Chain:
            prefix = chain.name
            override = ChainOverride(
                chain_id=env.get(f"{prefix}_CHAIN_ID") or None,
                usdc_address=env.get(f"{prefix}_USDC_ADDRESS") or None,
                rpc_url=env.get(f"{prefix}_RPC_URL") or None,
            )
            if not override.is_empty():
                overrides[chain] = override

        return cls(
            credentials=AggregatorCredentials(
                api_key=env["OKX_API_KEY"],
                secret_key=env["OKX_SECRET_KEY"],
                passphrase=env["OKX_PASSPHRASE"],
                base_url=(env.get("OKX_BASE_URL") or OKX_BASE_URL).rstrip("/"),
            ),
            wallet=WalletConfig(
                address=env["EVM_WALLET_ADDRESS"],
                private_key=env["EVM_PRIVATE_KEY"],
            ),
            default_slippage=env.get("DEFAULT_SLIPPAGE") or None,
            fee_percent=env.get("FEE_PERCENT", DEFAULT_FEE_PERCENT) or None,
            request_timeout=_float_env(env, "OKX_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            receipt_timeout=_float_env(env, "RECEIPT_TIMEOUT", DEFAULT_RECEIPT_TIMEOUT),
            quote_delay=_float_env(env, "QUOTE_DELAY_SECONDS", DEFAULT_QUOTE_DELAY),
            chain_overrides=overrides,
        )


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value
