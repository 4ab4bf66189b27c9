"""EVM chain access: connections, read accessors and transaction dispatch."""

from .balances import BalanceReader
from .connections import Web3Connections
from .transactions import TransactionDispatcher

__all__ = ["BalanceReader", "TransactionDispatcher", "Web3Connections"]
