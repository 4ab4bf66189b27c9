"""Tests for the signer connections and transaction dispatcher."""

from types import SimpleNamespace
from typing import Any, cast

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted

from okx_bridge.config import AggregatorCredentials, BridgeClientConfig, WalletConfig
from okx_bridge.constants import NETWORKS, STARGATE_SPENDER
from okx_bridge.evm import TransactionDispatcher, Web3Connections
from okx_bridge.exceptions import ConfigurationError, NetworkError, TransactionFailedError
from okx_bridge.registry import ChainRegistry
from okx_bridge.types import Chain, TransactionPayload

PRIVATE_KEY = "0x" + "22" * 32
SIGNER = Account.from_key(PRIVATE_KEY).address
TX_HASH = HexBytes("0x" + "ab" * 32)


def _config(address: str = SIGNER, private_key: str = PRIVATE_KEY) -> BridgeClientConfig:
    return BridgeClientConfig(
        credentials=AggregatorCredentials(api_key="k", secret_key="s", passphrase="p"),
        wallet=WalletConfig(address=address, private_key=private_key),
    )


class TestConnections:
    def test_connect_accepts_matching_wallet(self):
        connections = Web3Connections(_config(address=SIGNER.lower()), ChainRegistry())

        connections.connect()

        assert connections.is_connected()
        assert connections.wallet_address == SIGNER
        assert connections.account.address == SIGNER

    def test_connect_rejects_foreign_wallet(self):
        connections = Web3Connections(_config(address="0x" + "11" * 20), ChainRegistry())

        with pytest.raises(ConfigurationError):
            connections.connect()

        assert not connections.is_connected()

    def test_connect_rejects_bad_key(self):
        connections = Web3Connections(_config(private_key="not-a-key"), ChainRegistry())

        with pytest.raises(ConfigurationError):
            connections.connect()

    def test_connect_rejects_bad_address(self):
        connections = Web3Connections(_config(address="0x1234"), ChainRegistry())

        with pytest.raises(ConfigurationError):
            connections.connect()

    def test_accessors_require_connect(self):
        connections = Web3Connections(_config(), ChainRegistry())

        with pytest.raises(NetworkError):
            _ = connections.account
        with pytest.raises(NetworkError):
            connections.web3(Chain.BASE)

    def test_disconnect_clears_signer(self):
        connections = Web3Connections(_config(), ChainRegistry())
        connections.connect()

        connections.disconnect()

        assert not connections.is_connected()


class FakeEth:
    def __init__(self, receipt: Any = None, *, timeout: bool = False) -> None:
        self.receipt = receipt if receipt is not None else {"status": 1, "blockNumber": 7}
        self.timeout = timeout
        self.sent: list[dict[str, Any]] = []
        self.waited: list[tuple[Any, float]] = []

    def send_transaction(self, tx):
        self.sent.append(tx)
        return TX_HASH

    def wait_for_transaction_receipt(self, tx_hash, timeout):
        self.waited.append((tx_hash, timeout))
        if self.timeout:
            raise TimeExhausted("not mined")
        return self.receipt


class FakeApproveCall:
    def __init__(self, recorder: list[Any], spender: str, amount: int) -> None:
        self._recorder = recorder
        self._args = (spender, amount)

    def transact(self, params):
        self._recorder.append((*self._args, params))
        return TX_HASH


def _dispatcher(eth: FakeEth) -> tuple[TransactionDispatcher, list[Any]]:
    approvals: list[Any] = []
    contract = SimpleNamespace(
        functions=SimpleNamespace(
            approve=lambda spender, amount: FakeApproveCall(approvals, spender, amount)
        )
    )
    connections = SimpleNamespace(
        web3=lambda chain: SimpleNamespace(eth=eth),
        chain=lambda chain: NETWORKS[chain],
        account=SimpleNamespace(address=SIGNER),
        token_contract=lambda chain, symbol: contract,
    )
    dispatcher = TransactionDispatcher(cast(Web3Connections, connections), receipt_timeout=30)
    return dispatcher, approvals


class TestDispatcher:
    def test_send_eip1559_payload(self):
        eth = FakeEth()
        dispatcher, _ = _dispatcher(eth)
        payload = TransactionPayload.from_dict(
            {
                "to": STARGATE_SPENDER,
                "data": "0xabcdef",
                "value": "5",
                "gasLimit": "250000",
                "gasPrice": "2000",
                "maxPriorityFeePerGas": "100",
            }
        )

        submitted = dispatcher.send_payload(Chain.BASE, payload)

        (tx,) = eth.sent
        assert tx["chainId"] == 8453
        assert tx["from"] == SIGNER
        assert tx["value"] == 5
        assert tx["gas"] == 250000
        assert tx["maxFeePerGas"] == 2000
        assert tx["maxPriorityFeePerGas"] == 100
        assert "gasPrice" not in tx
        assert eth.waited == [(TX_HASH, 30)]
        assert submitted.tx_hash == TX_HASH.to_0x_hex()
        assert submitted.block_number == 7
        assert submitted.status == 1

    def test_reverted_transaction(self):
        dispatcher, _ = _dispatcher(FakeEth({"status": 0, "blockNumber": 7}))
        payload = TransactionPayload.from_dict({"to": STARGATE_SPENDER})

        with pytest.raises(TransactionFailedError) as excinfo:
            dispatcher.send_payload(Chain.BASE, payload)

        assert excinfo.value.tx_hash == TX_HASH.to_0x_hex()
        assert "basescan.org/tx/" in excinfo.value.message

    def test_receipt_timeout(self):
        dispatcher, _ = _dispatcher(FakeEth(timeout=True))
        payload = TransactionPayload.from_dict({"to": STARGATE_SPENDER})

        with pytest.raises(TransactionFailedError):
            dispatcher.send_payload(Chain.BASE, payload)

    def test_approve_checksums_spender(self):
        eth = FakeEth()
        dispatcher, approvals = _dispatcher(eth)

        submitted = dispatcher.approve(Chain.BASE, STARGATE_SPENDER.lower(), 100_000_000)

        assert approvals == [
            (Web3.to_checksum_address(STARGATE_SPENDER), 100_000_000, {"from": SIGNER})
        ]
        assert submitted.block_number == 7
        assert eth.sent == []
