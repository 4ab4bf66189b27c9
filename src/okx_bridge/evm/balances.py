"""Read-only balance and allowance accessors."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from web3 import Web3

from ..constants import USDC
from ..exceptions import NetworkError
from ..types import Chain
from .connections import Web3Connections

logger = logging.getLogger(__name__)


class BalanceReader:
    """Query native balances, gas prices and ERC-20 state without side effects."""

    def __init__(self, connections: Web3Connections) -> None:
        self._connections = connections

    def native_balance(self, chain: Chain, address: str) -> int:
        web3 = self._connections.web3(chain)
        owner = Web3.to_checksum_address(address)
        return int(self._call(chain, "eth_getBalance", lambda: web3.eth.get_balance(owner)))

    def gas_price(self, chain: Chain) -> int:
        web3 = self._connections.web3(chain)
        return int(self._call(chain, "eth_gasPrice", lambda: web3.eth.gas_price))

    def token_balance(self, chain: Chain, address: str, symbol: str = USDC) -> int:
        contract = self._connections.token_contract(chain, symbol)
        owner = Web3.to_checksum_address(address)
        return int(
            self._call(chain, f"{symbol}.balanceOf", contract.functions.balanceOf(owner).call)
        )

    def allowance(self, chain: Chain, owner: str, spender: str, symbol: str = USDC) -> int:
        contract = self._connections.token_contract(chain, symbol)
        call = contract.functions.allowance(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
        ).call
        return int(self._call(chain, f"{symbol}.allowance", call))

    def _call(self, chain: Chain, description: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except Exception as exc:  # pragma: no cover - defensive
            raise NetworkError(
                f"RPC read failed: {description}",
                endpoint=self._connections.chain(chain).rpc_url,
                details={"error": str(exc)},
            ) from exc
