"""Tests for environment configuration and the chain registry."""

import pytest

from okx_bridge.config import REQUIRED_ENV, BridgeClientConfig, ChainOverride
from okx_bridge.constants import BRIDGE_ROUTES, TOKENS, USDC, get_bridge_route
from okx_bridge.exceptions import ConfigurationError
from okx_bridge.registry import ChainRegistry
from okx_bridge.types import Chain

BASE_ENV = {
    "OKX_API_KEY": "key",
    "OKX_SECRET_KEY": "secret",
    "OKX_PASSPHRASE": "phrase",
    "EVM_WALLET_ADDRESS": "0x" + "11" * 20,
    "EVM_PRIVATE_KEY": "0x" + "22" * 32,
}


class TestFromEnv:
    def test_defaults(self):
        config = BridgeClientConfig.from_env(BASE_ENV)

        assert config.credentials.api_key == "key"
        assert config.credentials.base_url == "https://web3.okx.com"
        assert config.wallet.address == BASE_ENV["EVM_WALLET_ADDRESS"]
        assert config.default_slippage is None
        assert config.fee_percent == "0.5"
        assert config.request_timeout == 30.0
        assert config.receipt_timeout == 120.0
        assert config.quote_delay == 2.0
        assert config.chain_overrides == {}

    def test_missing_variables_are_listed(self):
        env = dict(BASE_ENV)
        del env["OKX_PASSPHRASE"]
        env["EVM_PRIVATE_KEY"] = ""

        with pytest.raises(ConfigurationError) as excinfo:
            BridgeClientConfig.from_env(env)

        assert excinfo.value.missing == ["OKX_PASSPHRASE", "EVM_PRIVATE_KEY"]

    def test_everything_missing(self):
        with pytest.raises(ConfigurationError) as excinfo:
            BridgeClientConfig.from_env({})

        assert excinfo.value.missing == list(REQUIRED_ENV)

    def test_optional_values(self):
        env = {
            **BASE_ENV,
            "OKX_BASE_URL": "https://example.test/",
            "DEFAULT_SLIPPAGE": "0.02",
            "FEE_PERCENT": "",
            "OKX_REQUEST_TIMEOUT": "10",
            "QUOTE_DELAY_SECONDS": "0",
        }

        config = BridgeClientConfig.from_env(env)

        assert config.credentials.base_url == "https://example.test"
        assert config.default_slippage == "0.02"
        assert config.fee_percent is None
        assert config.request_timeout == 10.0
        assert config.quote_delay == 0.0

    @pytest.mark.parametrize("raw", ["soon", "-1"])
    def test_bad_numbers(self, raw):
        with pytest.raises(ConfigurationError):
            BridgeClientConfig.from_env({**BASE_ENV, "RECEIPT_TIMEOUT": raw})

    def test_chain_overrides(self):
        env = {**BASE_ENV, "BASE_RPC_URL": "http://localhost:8545", "BSC_CHAIN_ID": "97"}

        config = BridgeClientConfig.from_env(env)

        assert config.chain_overrides == {
            Chain.BASE: ChainOverride(rpc_url="http://localhost:8545"),
            Chain.BSC: ChainOverride(chain_id="97"),
        }

    def test_secrets_hidden_from_repr(self):
        config = BridgeClientConfig.from_env(BASE_ENV)

        assert "secret" not in repr(config)
        assert BASE_ENV["EVM_PRIVATE_KEY"] not in repr(config)


class TestRegistry:
    def test_static_entries(self):
        registry = ChainRegistry()

        assert registry.chain(Chain.BASE).chain_id == "8453"
        assert registry.chain("polygon").name == "Polygon"
        assert registry.token(Chain.BSC).decimals == 18
        assert registry.token("arbitrum", "usdc") == TOKENS[(Chain.ARBITRUM, USDC)]
        assert registry.chains() == list(Chain)

    def test_overrides(self):
        registry = ChainRegistry.with_overrides(
            {
                Chain.BASE: ChainOverride(
                    chain_id="84532", usdc_address="0x" + "cc" * 20, rpc_url="http://node"
                )
            }
        )

        base = registry.chain(Chain.BASE)
        assert base.chain_id == "84532"
        assert base.chain_index == "84532"
        assert base.rpc_url == "http://node"
        assert registry.token(Chain.BASE).address == "0x" + "cc" * 20
        assert registry.token(Chain.BASE).decimals == 6
        assert registry.chain(Chain.ARBITRUM).chain_id == "42161"

    def test_from_config(self):
        config = BridgeClientConfig.from_env({**BASE_ENV, "POLYGON_RPC_URL": "http://poly"})

        registry = ChainRegistry.from_config(config)

        assert registry.chain(Chain.POLYGON).rpc_url == "http://poly"

    def test_unknown_entries(self):
        registry = ChainRegistry(tokens={})

        with pytest.raises(ValueError):
            registry.chain("solana")
        with pytest.raises(ValueError):
            registry.token(Chain.BASE)


class TestBridgeRoutes:
    def test_routes_cover_every_destination(self):
        assert set(BRIDGE_ROUTES) == {Chain.ARBITRUM, Chain.BSC, Chain.POLYGON}

    def test_lookup_by_name(self):
        route = get_bridge_route("BSC")

        assert route.destination is Chain.BSC
        assert route.default_slippage == "0.30"

    @pytest.mark.parametrize("destination", [Chain.BASE, "ethereum"])
    def test_unsupported_destination(self, destination):
        with pytest.raises(ValueError):
            get_bridge_route(destination)
