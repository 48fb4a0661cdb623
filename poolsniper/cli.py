"""Command-line interface for the pool sniper."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .app import Application, build_application
from .config import load_config
from .logging_setup import configure_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="pool-sniper",
        description="Watch for new liquidity pools, vet them and trade them",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="Watch for new pools and track holdings")

    track_parser = sub.add_parser("track", help="Track holdings and apply exits only")
    track_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Check interval in seconds (overrides config)",
    )

    sub.add_parser("holdings", help="Print open holdings with current PnL")

    sell_parser = sub.add_parser("sell", help="Sell the full position of one token")
    sell_parser.add_argument("mint", help="Token mint address")

    return parser


async def _sell(app: Application, mint: str) -> int:
    holding = app.ledger.get(mint)
    if holding is None:
        print(f"No open holding for {mint}")
        return 1

    result = await app.executor.sell(
        app.config.liquidity_pool.quote_mint, mint, holding.units
    )
    if result.success:
        print(f"Sold {holding.units} {holding.display_name}: {result.tx_id}")
        return 0
    print(f"Sell failed ({result.status.value}): {result.reason}")
    return 1


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    app = build_application(config)

    if args.command == "run":
        await app.run()
    elif args.command == "track":
        await app.exit_monitor.run_continuous(args.interval)
    elif args.command == "holdings":
        print(await app.exit_monitor.render_holdings())
    elif args.command == "sell":
        return await _sell(app, args.mint)
    else:
        build_parser().print_help()
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        sys.exit(130)
