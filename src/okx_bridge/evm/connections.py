"""Connection helpers for the chains the bridge touches."""

from __future__ import annotations

import logging
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import HTTPProvider, Web3
from web3.contract import Contract
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.types import ChecksumAddress

from ..abi import ERC20_abi
from ..config import BridgeClientConfig
from ..constants import USDC
from ..exceptions import ConfigurationError, NetworkError
from ..registry import ChainRegistry
from ..types import Chain, ChainDescriptor

logger = logging.getLogger(__name__)


class Web3Connections:
    """Manage per-chain Web3 providers, the signer account and token contract handles."""

    def __init__(self, config: BridgeClientConfig, registry: ChainRegistry):
        self.config = config
        self.registry = registry
        self._account: LocalAccount | None = None
        self._wallet_address: ChecksumAddress | None = None
        self._web3_by_chain: dict[Chain, Web3] = {}
        self._contracts: dict[tuple[Chain, str], Contract] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Derive the signer and check it owns the configured wallet address."""

        try:
            private_key = self.config.wallet.private_key
            signer = cast(LocalAccount, Account.from_key(private_key))  # type: ignore[arg-type]
        except Exception as exc:
            raise ConfigurationError(
                "Failed to derive signer account from EVM_PRIVATE_KEY",
                details={"error": str(exc)},
            ) from exc

        try:
            wallet_address = Web3.to_checksum_address(self.config.wallet.address)
        except ValueError as exc:
            raise ConfigurationError(
                "EVM_WALLET_ADDRESS is not a valid address",
                details={"value": self.config.wallet.address},
            ) from exc

        if signer.address != wallet_address:
            raise ConfigurationError(
                "EVM_PRIVATE_KEY does not control EVM_WALLET_ADDRESS",
                details={"signer": signer.address, "wallet": wallet_address},
            )

        self._account = signer
        self._wallet_address = wallet_address
        logger.info("Loaded signer %s", wallet_address)

    def disconnect(self) -> None:
        self._account = None
        self._wallet_address = None
        self._web3_by_chain.clear()
        self._contracts.clear()

    def is_connected(self) -> bool:
        return self._account is not None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            raise NetworkError("Signer account is not initialised; call connect() first")
        return self._account

    @property
    def wallet_address(self) -> ChecksumAddress:
        if self._wallet_address is None:
            raise NetworkError("Wallet address unavailable; call connect() first")
        return self._wallet_address

    def chain(self, chain: Chain) -> ChainDescriptor:
        return self.registry.chain(chain)

    def web3(self, chain: Chain) -> Web3:
        if chain in self._web3_by_chain:
            return self._web3_by_chain[chain]

        account = self.account
        descriptor = self.registry.chain(chain)
        web3 = self._build_web3_provider(descriptor.rpc_url, network_name=descriptor.name)
        self._apply_account_middleware(web3, account)
        self._web3_by_chain[chain] = web3
        logger.info("Connected to %s RPC at %s", descriptor.name, descriptor.rpc_url)
        return web3

    def token_contract(self, chain: Chain, symbol: str = USDC) -> Contract:
        key = (chain, symbol)
        if key not in self._contracts:
            token = self.registry.token(chain, symbol)
            self._contracts[key] = self.web3(chain).eth.contract(
                address=Web3.to_checksum_address(token.address),
                abi=ERC20_abi,
            )
        return self._contracts[key]

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3_provider(self, rpc_url: str, *, network_name: str) -> Web3:
        provider = HTTPProvider(rpc_url, request_kwargs={"timeout": self.config.request_timeout})
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError(f"Unable to connect to {network_name} RPC", endpoint=rpc_url)
        return web3

    def _apply_account_middleware(self, web3: Web3, account: LocalAccount) -> None:
        web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))  # type: ignore[arg-type]
        web3.eth.default_account = account.address
