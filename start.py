"""
Crypto Forecast - Entry Point
Fetches market data, computes technical indicators and asks an AI model for a trading analysis.
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from crypto_forecast.app import ForecastPipeline
from crypto_forecast.config.loader import Config
from crypto_forecast.exceptions import ConfigError, ForecastError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.utils.graceful_shutdown_manager import GracefulShutdownManager


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Crypto Forecast - AI-assisted market analysis from Binance candles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python start.py                          # Analyze the configured symbol and print to console
  python start.py --only-prompt            # Print the generated prompt, skip the AI call
  python start.py --output telegram        # Send the analysis to Telegram
  python start.py --symbol ETHUSDT -i 1d   # Analyze ETHUSDT daily candles
        """
    )
    parser.add_argument(
        "--only-prompt",
        action="store_true",
        help="Print the prompt and exit without calling the AI provider"
    )
    parser.add_argument(
        "--output",
        choices=["console", "telegram"],
        default=None,
        help="Where to deliver the analysis. Default: from config"
    )
    parser.add_argument(
        "--symbol",
        default=None,
        help="Binance symbol (e.g., BTCUSDT). Default: from config"
    )
    parser.add_argument(
        "-i", "--interval",
        default=None,
        help="Kline interval (e.g., 1h, 4h, 1d). Default: from config"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Days of history to fetch. Default: from config"
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    return Config(overrides={
        "general": {
            "symbol": args.symbol,
            "interval": args.interval,
            "history_days": args.days,
            "output": args.output,
        }
    })


async def main_async(args: argparse.Namespace, config: Config, logger: Logger) -> int:
    """Async entry point for the application"""
    pipeline = ForecastPipeline(logger, config, only_prompt=args.only_prompt)

    logger.info(f"{'=' * 60}")
    logger.info("CRYPTO FORECAST")
    logger.info(f"Symbol: {config.SYMBOL}")
    logger.info(f"Interval: {config.INTERVAL} ({config.HISTORY_DAYS} days)")
    logger.info(f"{'=' * 60}")

    try:
        await pipeline.initialize()
        await pipeline.run()
    except ForecastError as e:
        logger.error(f"Forecast aborted: {type(e).__name__}: {e}")
        return 1
    except asyncio.CancelledError:
        logger.info("Run cancelled, shutting down...")
        return 130
    finally:
        await pipeline.shutdown()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = parse_args(argv)

    try:
        config = build_config(args)
        config.validate_for_run(only_prompt=args.only_prompt)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger = Logger(logger_name="Forecast", logger_debug=config.LOGGER_DEBUG, log_dir=config.LOG_DIR)

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    shutdown_manager = GracefulShutdownManager(loop)
    shutdown_manager.setup_signal_handlers()

    try:
        task = loop.create_task(main_async(args, config, logger))
        shutdown_manager.register_main_task(task)
        return loop.run_until_complete(task)
    except asyncio.CancelledError:
        return 130
    finally:
        loop.close()


if __name__ == "__main__":
    sys.exit(main())
