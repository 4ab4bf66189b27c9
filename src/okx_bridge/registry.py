"""Chain and token lookups with optional configuration overrides."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from .config import BridgeClientConfig, ChainOverride
from .constants import NETWORKS, TOKENS, USDC
from .types import Chain, ChainDescriptor, TokenDescriptor

logger = logging.getLogger(__name__)


class ChainRegistry:
    """Immutable view over chain descriptors and token descriptors."""

    def __init__(
        self,
        chains: Mapping[Chain, ChainDescriptor] | None = None,
        tokens: Mapping[tuple[Chain, str], TokenDescriptor] | None = None,
    ) -> None:
        self._chains = dict(NETWORKS if chains is None else chains)
        self._tokens = dict(TOKENS if tokens is None else tokens)

    @classmethod
    def from_config(cls, config: BridgeClientConfig) -> ChainRegistry:
        return cls.with_overrides(config.chain_overrides)

    @classmethod
    def with_overrides(cls, overrides: Mapping[Chain, ChainOverride]) -> ChainRegistry:
        chains = dict(NETWORKS)
        tokens = dict(TOKENS)

        for chain, override in overrides.items():
            descriptor = chains[chain]
            if override.chain_id is not None:
                # chain index mirrors the chain id for every EVM network the aggregator lists
                descriptor = replace(
                    descriptor, chain_id=override.chain_id, chain_index=override.chain_id
                )
            if override.rpc_url is not None:
                descriptor = replace(descriptor, rpc_url=override.rpc_url)
            chains[chain] = descriptor

            if override.usdc_address is not None:
                key = (chain, USDC)
                tokens[key] = replace(tokens[key], address=override.usdc_address)

            logger.debug("Applied registry override for %s: %s", chain.value, override)

        return cls(chains, tokens)

    def chain(self, chain: Chain | str) -> ChainDescriptor:
        key = Chain.parse(chain)
        if key not in self._chains:
            raise ValueError(f"Chain not registered: {key.value}")
        return self._chains[key]

    def token(self, chain: Chain | str, symbol: str = USDC) -> TokenDescriptor:
        key = (Chain.parse(chain), symbol.upper())
        if key not in self._tokens:
            raise ValueError(f"Token {symbol} not registered on {key[0].value}")
        return self._tokens[key]

    def chains(self) -> list[Chain]:
        return list(self._chains)
