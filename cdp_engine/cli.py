"""Command-line interface for the CDP engine."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation

from .config import EngineConfig, load_config
from .constants import MAX_HEALTH_FACTOR
from .engine import PositionEngine
from .errors import EngineError, HealthFactorBroken
from .events import LoggingEventListener
from .logging_setup import configure_logging
from .oracles import PythPriceFeed
from .registry import AssetRegistry
from .tokens import InMemoryToken

logger = logging.getLogger(__name__)

SCRATCH_ACCOUNT = "cli-user"


def format_fixed(value: int, decimals: int = 18) -> str:
    """Render a fixed-point integer, e.g. ``format_fixed(15 * 10**17) == "1.5"``."""
    if value == MAX_HEALTH_FACTOR:
        return "inf"
    text = f"{Decimal(value).scaleb(-decimals):f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def parse_amount(text: str, decimals: int) -> int:
    """Convert a human amount ("1.5") to native fixed-point units."""
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid amount: {text!r}") from None
    return int(amount.scaleb(decimals))


def _collateral_arg(text: str) -> tuple[str, str]:
    symbol, sep, amount = text.partition("=")
    if not sep or not symbol or not amount:
        raise argparse.ArgumentTypeError(
            f"Expected SYMBOL=AMOUNT, got {text!r}"
        )
    return symbol.upper(), amount


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="cdp-engine",
        description="Overcollateralized synthetic-dollar engine",
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

    sub.add_parser("params", help="Show risk parameters and collateral assets")
    sub.add_parser("prices", help="Fetch collateral prices from Pyth")

    health_parser = sub.add_parser(
        "health", help="Health factor of a hypothetical position at live prices"
    )
    health_parser.add_argument(
        "--collateral",
        action="append",
        type=_collateral_arg,
        default=[],
        metavar="SYMBOL=AMOUNT",
        help="Collateral to deposit (repeatable)",
    )
    health_parser.add_argument(
        "--debt",
        default="0",
        help="Synthetic dollars to mint (default: 0)",
    )

    return parser


def _print_params(config: EngineConfig) -> None:
    params = config.risk_parameters()
    print(f"Liquidation threshold: {params.liquidation_threshold}/{params.liquidation_precision}")
    print(f"Liquidation bonus:     {params.liquidation_bonus}/{params.liquidation_precision}")
    print(f"Min health factor:     {format_fixed(params.min_health_factor)}")
    print("Collateral:")
    for asset in config.assets:
        print(f"  {asset.symbol:<8} decimals={asset.decimals:<3} feed={asset.feed_id}")


async def _refresh_feed(config: EngineConfig) -> PythPriceFeed:
    feed = PythPriceFeed(config.price_oracle.pyth, [a.feed_id for a in config.assets])
    await feed.refresh()
    return feed


async def _print_prices(config: EngineConfig) -> int:
    feed = await _refresh_feed(config)
    registry = AssetRegistry(config.supported_assets())
    missing = 0
    for asset in registry:
        try:
            price = feed.latest_price(asset.feed_id)
        except EngineError as e:
            logger.error("%s: %s", asset.symbol, e)
            missing += 1
            continue
        print(f"{asset.symbol:<8} ${format_fixed(price.price, price.decimals)}")
    return 1 if missing else 0


async def _print_health(config: EngineConfig, args: argparse.Namespace) -> int:
    feed = await _refresh_feed(config)
    registry = AssetRegistry(config.supported_assets())
    tokens = {a.symbol: InMemoryToken(a.symbol, a.decimals) for a in registry}
    engine = PositionEngine(
        registry,
        feed,
        tokens,
        InMemoryToken("cdpUSD"),
        params=config.risk_parameters(),
    )
    engine.subscribe(LoggingEventListener())

    try:
        for symbol, text in args.collateral:
            amount = parse_amount(text, registry.get(symbol).decimals)
            tokens[symbol].mint(SCRATCH_ACCOUNT, amount)
            engine.deposit_collateral(SCRATCH_ACCOUNT, symbol, amount)

        debt = parse_amount(args.debt, 18)
        collateral_usd = engine.get_account_collateral_value(SCRATCH_ACCOUNT)
        print(f"Collateral value: ${format_fixed(collateral_usd)}")
        print(f"Debt:             ${format_fixed(debt)}")
        print(
            "Health factor:    "
            + format_fixed(engine.calculate_health_factor(debt, collateral_usd))
        )
        if debt > 0:
            engine.mint_debt(SCRATCH_ACCOUNT, debt)
    except HealthFactorBroken as e:
        print(f"Position would be unsafe (health factor {format_fixed(e.health_factor)})")
        return 1
    except (EngineError, argparse.ArgumentTypeError) as e:
        logger.error("%s", e)
        return 1
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "params":
        _print_params(config)
        return 0
    if args.command == "prices":
        return await _print_prices(config)
    if args.command == "health":
        return await _print_health(config, args)

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))

