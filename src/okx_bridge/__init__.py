"""OKX USDC Bridge - move USDC from Base to other EVM chains.

This library wraps the OKX DEX cross-chain aggregator API and a local
signing wallet to bridge USDC from Base to Arbitrum, BNB Smart Chain and
Polygon.
"""

from .api import OKXDexClient
from .bridge import AVOID_ACROSS, BridgeService, avoid_bridge, select_route
from .config import AggregatorCredentials, BridgeClientConfig, WalletConfig
from .exceptions import (
    AggregatorError,
    BridgeError,
    ConfigurationError,
    InsufficientBalanceError,
    InsufficientGasError,
    InvalidAmountError,
    NetworkError,
    TransactionFailedError,
    ValidationError,
)
from .registry import ChainRegistry
from .types import (
    BridgeEstimate,
    BridgeResult,
    BridgeRoute,
    BridgeStatus,
    Chain,
    ChainDescriptor,
    QuoteRequest,
    RouteOption,
    StatusRecord,
    TokenDescriptor,
    TransactionPayload,
)
from .utils import format_units, from_base_units, to_base_units

__version__ = "0.1.0"

__all__ = [
    # Services
    "BridgeService",
    "OKXDexClient",
    "ChainRegistry",
    # Route selection
    "AVOID_ACROSS",
    "avoid_bridge",
    "select_route",
    # Configuration
    "AggregatorCredentials",
    "BridgeClientConfig",
    "WalletConfig",
    # Types and enums
    "Chain",
    "BridgeStatus",
    "ChainDescriptor",
    "TokenDescriptor",
    "BridgeRoute",
    "QuoteRequest",
    "RouteOption",
    "TransactionPayload",
    "BridgeEstimate",
    "BridgeResult",
    "StatusRecord",
    # Exceptions
    "BridgeError",
    "ConfigurationError",
    "NetworkError",
    "AggregatorError",
    "ValidationError",
    "InvalidAmountError",
    "InsufficientGasError",
    "InsufficientBalanceError",
    "TransactionFailedError",
    # Utility functions
    "to_base_units",
    "from_base_units",
    "format_units",
]
