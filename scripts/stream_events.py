#!/usr/bin/env python3
"""
Print events from a combined Binance stream.

Subscribes to the channels in config/settings.yaml (or the ones given on
the command line) and logs every decoded event until the server closes
the stream.

Usage:
    python scripts/stream_events.py
    python scripts/stream_events.py btcusdt@kline_1m solusdt@aggTrade

Press Ctrl+C to stop.
"""

import argparse
import asyncio
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from binance_client.data.events import AggTradeEvent, KlineEvent, ParseErrorEvent
from binance_client.data.websocket import create_websocket_from_config
from binance_client.utils.config import load_config, print_config_summary
from binance_client.utils.logger import setup_logger_from_config

DEFAULT_CHANNELS = ["btcusdt@kline_1m", "solusdt@aggTrade"]

# Statistics
stats = Counter()


def log_event(event) -> None:
    stats[event.kind.value] += 1

    if isinstance(event, AggTradeEvent):
        logger.info(
            f"TRADE: {event.symbol} {event.side.value:4} "
            f"{event.quantity} @ {event.price} | Value: {event.value:.2f}"
        )
    elif isinstance(event, KlineEvent):
        k = event.kline
        logger.info(
            f"KLINE: {k.symbol} {k.interval} O:{k.open} H:{k.high} L:{k.low} C:{k.close}"
            f"{' (closed)' if k.closed else ''}"
        )
    elif isinstance(event, ParseErrorEvent):
        logger.warning(f"Undecodable frame: {event.error}")
    else:
        logger.info(f"{event.kind.value}: {event}")


def print_stats(start_time: datetime) -> None:
    runtime = datetime.now(timezone.utc) - start_time

    print("\n" + "=" * 60)
    print(f"Runtime: {runtime}")
    for kind, count in stats.most_common():
        print(f"  {kind:<20} {count:>8,}")
    print("=" * 60)


async def main(args: argparse.Namespace) -> None:
    config = {}
    if Path(args.config).exists():
        config = load_config(args.config)

    setup_logger_from_config(config, level=args.log_level)
    print_config_summary(config)

    channels = args.channels or config.get("stream", {}).get("channels") or DEFAULT_CHANNELS

    websocket = create_websocket_from_config(config)
    start_time = datetime.now(timezone.utc)

    try:
        await websocket.connect_combined(channels)

        async for event in websocket:
            log_event(event)

        logger.info("WebSocket stream is done.")
    except KeyboardInterrupt:
        logger.info("Stopping...")
    finally:
        await websocket.close()
        print_stats(start_time)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print events from a combined Binance stream")
    parser.add_argument("channels", nargs="*", help="Stream names, e.g. btcusdt@kline_1m")
    parser.add_argument("--config", default="config/settings.yaml", help="Settings file")
    parser.add_argument("--log-level", help="Logging level (overrides logging.level)")

    asyncio.run(main(parser.parse_args()))
