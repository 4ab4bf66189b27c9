"""Example: quote and bridge USDC from Base to Arbitrum with BridgeService."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from okx_bridge import BridgeClientConfig, BridgeError, BridgeService, Chain

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("bridge_base_to_arbitrum")

DEFAULT_AMOUNT = "1"


def main() -> None:
    amount = os.getenv("BRIDGE_AMOUNT_USDC", DEFAULT_AMOUNT)
    execute = os.getenv("BRIDGE_EXECUTE", "false").lower() == "true"

    service = BridgeService.from_config(BridgeClientConfig.from_env())
    try:
        balances = service.get_balances([Chain.BASE, Chain.ARBITRUM])
        for chain, balance in balances.items():
            logger.info("%s USDC balance: %s", chain.value, balance)

        estimate = service.estimate_bridge(Chain.ARBITRUM, amount)
        logger.info(
            "Quote via %s: receive %s (min %s) base units, eta %s",
            estimate.bridge_name,
            estimate.to_amount,
            estimate.minimum_receive,
            estimate.estimated_time,
        )

        if not execute:
            logger.info("Set BRIDGE_EXECUTE=true to submit the transfer")
            return

        result = service.execute_bridge(Chain.ARBITRUM, amount)
        logger.info("Bridge submitted: %s", result.tx_hash)
        logger.info("  explorer: %s", result.explorer_url)

        status = service.check_transaction_status(result.tx_hash)
        logger.info("  aggregator status: %s", status.status or "unknown")
    except BridgeError as exc:
        logger.error("Bridge example failed: %s", exc.message)
        if exc.details:
            logger.debug("  details: %s", exc.details)
    finally:
        service.close()


if __name__ == "__main__":
    main()
