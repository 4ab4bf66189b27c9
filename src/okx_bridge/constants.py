"""Constants and static chain/token mappings for the OKX USDC bridge."""

from .types import BridgeRoute, Chain, ChainDescriptor, TokenDescriptor

SOURCE_CHAIN = Chain.BASE
USDC = "USDC"

NETWORKS: dict[Chain, ChainDescriptor] = {
    Chain.BASE: ChainDescriptor(
        chain_id="8453",
        chain_index="8453",
        name="Base",
        rpc_url="https://mainnet.base.org",
        explorer_url="https://basescan.org",
    ),
    Chain.ARBITRUM: ChainDescriptor(
        chain_id="42161",
        chain_index="42161",
        name="Arbitrum One",
        rpc_url="https://arb1.arbitrum.io/rpc",
        explorer_url="https://arbiscan.io",
    ),
    Chain.BSC: ChainDescriptor(
        chain_id="56",
        chain_index="56",
        name="BNB Smart Chain",
        rpc_url="https://bsc-dataseed.binance.org",
        explorer_url="https://bscscan.com",
    ),
    Chain.POLYGON: ChainDescriptor(
        chain_id="137",
        chain_index="137",
        name="Polygon",
        rpc_url="https://polygon-rpc.com",
        explorer_url="https://polygonscan.com",
    ),
}

TOKENS: dict[tuple[Chain, str], TokenDescriptor] = {
    # Native USDC
    (Chain.BASE, USDC): TokenDescriptor(
        address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", decimals=6, symbol=USDC
    ),
    (Chain.ARBITRUM, USDC): TokenDescriptor(
        address="0xaf88d065e77c8cC2239327C5EDb3A432268e5831", decimals=6, symbol=USDC
    ),
    # Binance-peg USDC uses 18 decimals
    (Chain.BSC, USDC): TokenDescriptor(
        address="0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d", decimals=18, symbol=USDC
    ),
    # Bridged USDC.e
    (Chain.POLYGON, USDC): TokenDescriptor(
        address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174", decimals=6, symbol=USDC
    ),
}

OKX_BASE_URL = "https://web3.okx.com"
CROSS_CHAIN_QUOTE = "/api/v5/dex/cross-chain/quote"
CROSS_CHAIN_BUILD = "/api/v5/dex/cross-chain/build-tx"
CROSS_CHAIN_STATUS = "/api/v5/dex/cross-chain/status"
SUPPORTED_CHAINS = "/api/v5/dex/cross-chain/supported/chains"
SUPPORTED_TOKENS = "/api/v5/dex/cross-chain/supported/tokens"
SUPPORTED_BRIDGES = "/api/v5/dex/cross-chain/supported/bridges"

SUCCESS_CODE = "0"

DEFAULT_SLIPPAGE = "0.01"
DEFAULT_FEE_PERCENT = "0.5"
OPTIMAL_ROUTE = 1
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_QUOTE_DELAY = 2.0

ESTIMATED_GAS_LIMIT = 200_000
FALLBACK_GAS_PRICE = 1_000_000_000
GAS_SAFETY_MULTIPLIER = 2
APPROVAL_MULTIPLIER = 100

# Spenders seen in transaction traces of routed bridges on Base
OKX_AGGREGATOR = "0x997aAb9324e9fE456Cc0E64AF510D770707c8d78"
STARGATE_SPENDER = "0x57df6092665eb6058DE53939612413ff4B09114E"
ACROSS_SPENDER = "0x41ee28ee05341e7fdddc8d433ba66054cd302ca1"

BRIDGE_ROUTES: dict[Chain, BridgeRoute] = {
    Chain.ARBITRUM: BridgeRoute(
        destination=Chain.ARBITRUM,
        default_slippage=DEFAULT_SLIPPAGE,
        extra_spenders=(STARGATE_SPENDER,),
    ),
    Chain.BSC: BridgeRoute(
        destination=Chain.BSC,
        default_slippage="0.30",
        extra_spenders=(STARGATE_SPENDER,),
    ),
    Chain.POLYGON: BridgeRoute(
        destination=Chain.POLYGON,
        default_slippage="0.30",
        extra_spenders=(STARGATE_SPENDER, ACROSS_SPENDER),
    ),
}


def get_bridge_route(destination: Chain | str) -> BridgeRoute:
    """Get the bridge parameters for a destination chain.

    Args:
        destination: Destination chain (e.g., ``Chain.BSC`` or ``"polygon"``)

    Returns:
        Bridge route parameters

    Raises:
        ValueError: If no route from Base exists for the destination
    """
    chain = Chain.parse(destination)
    if chain not in BRIDGE_ROUTES:
        raise ValueError(f"No bridge route from {SOURCE_CHAIN.value} to {chain.value}")
    return BRIDGE_ROUTES[chain]
