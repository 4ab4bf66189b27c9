"""Transaction dispatch helpers: approvals, payload submission and receipts."""

from __future__ import annotations

import logging
from typing import Any

from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted

from ..constants import DEFAULT_RECEIPT_TIMEOUT, USDC
from ..exceptions import NetworkError, TransactionFailedError
from ..types import Chain, SubmittedTransaction, TransactionPayload
from ..utils import serialise_receipt
from .connections import Web3Connections

logger = logging.getLogger(__name__)


class TransactionDispatcher:
    """Submit signed writes and wait for exactly one confirmation."""

    def __init__(
        self,
        connections: Web3Connections,
        *,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        self._connections = connections
        self._receipt_timeout = receipt_timeout

    def approve(
        self, chain: Chain, spender: str, amount: int, symbol: str = USDC
    ) -> SubmittedTransaction:
        contract = self._connections.token_contract(chain, symbol)
        sender = self._connections.account.address
        action = f"{symbol}.approve"

        try:
            tx_hash = contract.functions.approve(
                Web3.to_checksum_address(spender), amount
            ).transact({"from": sender})
        except Exception as exc:  # pragma: no cover - defensive
            raise NetworkError(
                f"Failed to submit {action}",
                endpoint=self._connections.chain(chain).rpc_url,
                details={"spender": spender, "amount": amount, "error": str(exc)},
            ) from exc

        logger.info("Approval transaction: %s", HexBytes(tx_hash).to_0x_hex())
        return self._confirm(chain, tx_hash, action)

    def send_payload(self, chain: Chain, payload: TransactionPayload) -> SubmittedTransaction:
        web3 = self._connections.web3(chain)
        descriptor = self._connections.chain(chain)
        tx = payload.to_tx_params(self._connections.account.address, int(descriptor.chain_id))
        logger.debug(
            "Submitting %s transaction: %s",
            "EIP-1559" if payload.is_eip1559 else "legacy",
            tx,
        )

        try:
            tx_hash = web3.eth.send_transaction(tx)
        except Exception as exc:  # pragma: no cover - defensive
            raise NetworkError(
                "Failed to submit bridge transaction",
                endpoint=descriptor.rpc_url,
                details={"to": payload.to, "error": str(exc)},
            ) from exc

        tx_hex = HexBytes(tx_hash).to_0x_hex()
        logger.info("Transaction submitted: %s", tx_hex)
        logger.info("View on %s explorer: %s", descriptor.name, descriptor.tx_url(tx_hex))
        return self._confirm(chain, tx_hash, "bridge")

    def _confirm(self, chain: Chain, tx_hash: Any, action: str) -> SubmittedTransaction:
        web3 = self._connections.web3(chain)
        descriptor = self._connections.chain(chain)
        tx_hex = HexBytes(tx_hash).to_0x_hex()

        try:
            receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        except TimeExhausted as exc:
            raise TransactionFailedError(
                f"{action} transaction was not mined within {self._receipt_timeout:.0f}s. "
                f"Check: {descriptor.tx_url(tx_hex)}",
                tx_hash=tx_hex,
            ) from exc

        if not receipt or receipt.get("status") == 0:
            raise TransactionFailedError(
                f"{action} transaction failed. Check: {descriptor.tx_url(tx_hex)}",
                tx_hash=tx_hex,
                details={"receipt": serialise_receipt(receipt)},
            )

        block_number = receipt.get("blockNumber")
        logger.info(
            "Transaction confirmed for action=%s hash=%s block=%s", action, tx_hex, block_number
        )
        return SubmittedTransaction(
            tx_hash=tx_hex,
            block_number=block_number,
            status=receipt.get("status"),
            receipt=serialise_receipt(receipt),
        )
