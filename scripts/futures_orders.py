#!/usr/bin/env python3
"""
List or cancel USD-M futures orders.

Credentials are read from BINANCE_API_KEY / BINANCE_API_SECRET (a .env
file in the working directory is loaded first).

Usage:
    python scripts/futures_orders.py open-orders [--symbol BTCUSDT]
    python scripts/futures_orders.py cancel --symbol BTCUSDT --order-id 123
    python scripts/futures_orders.py cancel --symbol BTCUSDT --client-order-id my-id
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
from loguru import logger

from binance_client.data.models import CancelOrder
from binance_client.execution.errors import APIError
from binance_client.execution.futures_api import FuturesClient
from binance_client.utils.config import get_api_credentials, load_config, print_config_summary
from binance_client.utils.logger import setup_logger_from_config


async def open_orders(client: FuturesClient, args: argparse.Namespace) -> None:
    orders = await client.get_open_orders(args.symbol)
    for order in orders:
        print(order)
    logger.info(f"{len(orders)} open order(s)")


async def cancel(client: FuturesClient, args: argparse.Namespace) -> None:
    request = CancelOrder(args.symbol, order_id=args.order_id, client_order_id=args.client_order_id)
    try:
        response = await client.cancel_order(request)
        print(f"success: {response}")
    except APIError as e:
        print(f"error: {e}")


async def main(args: argparse.Namespace) -> int:
    config = {}
    if Path(args.config).exists():
        config = load_config(args.config)

    setup_logger_from_config(config, level=args.log_level)
    print_config_summary(config)

    credentials = get_api_credentials(config)
    if credentials is None:
        logger.error("BINANCE_API_KEY and BINANCE_API_SECRET must be set")
        return 1

    async with FuturesClient(credentials, testnet=args.testnet) as client:
        await args.handler(client, args)
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Binance futures order tool")
    parser.add_argument("--testnet", action="store_true", help="Use the futures testnet")
    parser.add_argument("--config", default="config/settings.yaml", help="Settings file")
    parser.add_argument("--log-level", help="Logging level (overrides logging.level)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    orders_parser = subparsers.add_parser("open-orders", help="List open orders")
    orders_parser.add_argument("--symbol", help="Only orders for this symbol")
    orders_parser.set_defaults(handler=open_orders)

    cancel_parser = subparsers.add_parser("cancel", help="Cancel an order")
    cancel_parser.add_argument("--symbol", required=True)
    cancel_parser.add_argument("--order-id", type=int)
    cancel_parser.add_argument("--client-order-id")
    cancel_parser.set_defaults(handler=cancel)

    args = parser.parse_args()
    if args.command == "cancel" and args.order_id is None and args.client_order_id is None:
        parser.error("cancel needs --order-id or --client-order-id")
    return args


if __name__ == "__main__":
    load_dotenv()
    sys.exit(asyncio.run(main(parse_args())))
