"""Command-line entry points for bridging USDC out of Base."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable, Sequence
from decimal import Decimal

from dotenv import load_dotenv

from .bridge import BridgeService
from .config import BridgeClientConfig
from .constants import BRIDGE_ROUTES, NETWORKS, SOURCE_CHAIN
from .exceptions import BridgeError, ConfigurationError
from .types import Chain
from .utils import from_base_units

logger = logging.getLogger("okx_bridge")

EXECUTE_COMMANDS = {
    "execute": Chain.ARBITRUM,
    "execute-bsc": Chain.BSC,
    "execute-polygon": Chain.POLYGON,
}

Handler = Callable[[BridgeService, argparse.Namespace], None]


# ----------------------------------------------------------------------
# Command handlers
# ----------------------------------------------------------------------
def _cmd_execute(service: BridgeService, args: argparse.Namespace) -> None:
    destination = service.registry.chain(args.destination)
    logger.info(
        "Starting USDC bridge from Base to %s (amount %s USDC)", destination.name, args.amount
    )

    result = service.execute_bridge(
        args.destination,
        args.amount,
        slippage=args.slippage,
        referrer=args.referrer,
        fee_percent=args.fee_percent,
    )

    print("Bridge transaction confirmed on the source chain")
    print(f"Transaction Hash: {result.tx_hash}")
    print(f"From: {result.from_chain} ({result.amount} {result.from_token})")
    print(f"To: {result.to_chain} ({result.to_token})")
    print(f"Status: {result.status.value}")
    if result.explorer_url:
        print(f"Explorer: {result.explorer_url}")


def _cmd_balance(service: BridgeService, args: argparse.Namespace) -> None:
    for chain, balance in service.get_balances().items():
        descriptor = service.registry.chain(chain)
        token = service.registry.token(chain)
        print(f"{descriptor.name} {token.symbol} Balance: {balance} {token.symbol}")


def _cmd_status(service: BridgeService, args: argparse.Namespace) -> None:
    record = service.check_transaction_status(args.tx_hash)
    print(json.dumps(record.raw, indent=2))


def _cmd_allowances(service: BridgeService, args: argparse.Namespace) -> None:
    token = service.registry.token(SOURCE_CHAIN)
    balance = service.get_balances([SOURCE_CHAIN])[SOURCE_CHAIN]
    print(f"{token.symbol} Balance: {balance} {token.symbol}")
    print("Allowances:")
    for spender, allowance in service.get_allowances(args.spenders or None).items():
        print(f"  {spender}: {allowance} {token.symbol}")


def _cmd_bridges(service: BridgeService, args: argparse.Namespace) -> None:
    print(json.dumps(service.list_supported_bridges(), indent=2))


def _cmd_chains(service: BridgeService, args: argparse.Namespace) -> None:
    print(json.dumps(service.list_supported_chains(), indent=2))


def _cmd_quote(service: BridgeService, args: argparse.Namespace) -> None:
    source = service.registry.chain(SOURCE_CHAIN)
    dest = service.registry.chain(args.to)
    dest_token = service.registry.token(args.to)

    estimate = service.estimate_bridge(args.to, args.amount, slippage=args.slippage)

    input_amount = Decimal(args.amount)
    output_amount = from_base_units(estimate.to_amount, dest_token.decimals)
    minimum = from_base_units(estimate.minimum_receive, dest_token.decimals)
    impact = (input_amount - output_amount) / input_amount * 100
    rate = output_amount / input_amount

    print("Bridge Estimate:")
    print(f"From Amount:     {args.amount} USDC ({source.name})")
    print(f"To Amount:       {output_amount} {dest_token.symbol} ({dest.name})")
    print(f"Minimum Receive: {minimum} {dest_token.symbol}")
    print(f"Bridge:          {estimate.bridge_name}")
    print(f"Estimated Time:  {estimate.estimated_time}")
    print("Fees Breakdown:")
    print(f"Cross-chain Fee: {estimate.cross_chain_fee}")
    print(f"Native Fee:      {estimate.native_fee}")
    print(f"Price Impact:    {impact:.4f}%")
    print(f"Exchange Rate:   1 USDC ({source.name}) = {rate:.6f} USDC ({dest.name})")


# ----------------------------------------------------------------------
# Parsers
# ----------------------------------------------------------------------
def _add_log_level(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOGLEVEL", "INFO"),
        help="Logging level (default: $LOGLEVEL or INFO)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="okx-bridge",
        description="Bridge USDC from Base using the OKX cross-chain aggregator",
    )
    _add_log_level(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    for name, destination in EXECUTE_COMMANDS.items():
        route = BRIDGE_ROUTES[destination]
        label = NETWORKS[destination].name
        cmd = sub.add_parser(name, help=f"Execute bridge transaction from Base to {label}")
        cmd.add_argument("amount", help="Amount of USDC to bridge")
        cmd.add_argument(
            "-s",
            "--slippage",
            help=f"Slippage tolerance (default: {route.default_slippage})",
        )
        cmd.add_argument("-r", "--referrer", help="Referrer address")
        cmd.add_argument("-f", "--fee", dest="fee_percent", help="Fee percentage")
        cmd.set_defaults(handler=_cmd_execute, destination=destination)

    sub.add_parser("balance", help="Check USDC balances on every chain").set_defaults(
        handler=_cmd_balance
    )

    status = sub.add_parser("status", help="Check bridge transaction status")
    status.add_argument("tx_hash", help="Transaction hash to check")
    status.set_defaults(handler=_cmd_status)

    allowances = sub.add_parser("allowances", help="Check USDC allowances on Base")
    allowances.add_argument(
        "spenders", nargs="*", help="Spender addresses (default: OKX aggregator and Stargate)"
    )
    allowances.set_defaults(handler=_cmd_allowances)

    sub.add_parser("bridges", help="List bridge providers supported by OKX").set_defaults(
        handler=_cmd_bridges
    )
    sub.add_parser("chains", help="List chains supported by OKX").set_defaults(
        handler=_cmd_chains
    )
    return parser


def build_estimate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="okx-bridge-estimate",
        description="Estimate bridge costs and time for USDC from Base",
    )
    _add_log_level(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Get bridge quote and estimation")
    quote.add_argument("amount", help="Amount of USDC to estimate")
    quote.add_argument(
        "--to",
        type=Chain.parse,
        choices=list(BRIDGE_ROUTES),
        default=Chain.ARBITRUM,
        help="Destination chain (default: arbitrum)",
    )
    quote.add_argument("-s", "--slippage", help="Slippage tolerance")
    quote.set_defaults(handler=_cmd_quote)
    return parser


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------
def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _run(args: argparse.Namespace) -> int:
    handler: Handler = args.handler

    try:
        config = BridgeClientConfig.from_env()
        service = BridgeService.from_config(config)
    except ConfigurationError as exc:
        logger.error("%s", exc.message)
        logger.info("Copy .env.example to .env and fill in your OKX API credentials and wallet")
        return 1
    except BridgeError as exc:
        logger.error("Failed to initialise bridge: %s", exc.message)
        return 1

    try:
        handler(service, args)
    except BridgeError as exc:
        logger.error("%s failed: %s", args.command, exc.message)
        if exc.details:
            logger.debug("  details: %s", exc.details)
        return 1
    finally:
        service.close()

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    return _run(args)


def estimate_main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = build_estimate_parser().parse_args(argv)
    _configure_logging(args.log_level)
    return _run(args)


if __name__ == "__main__":
    sys.exit(main())
