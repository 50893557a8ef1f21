"""
CryptoSensei - Entry Point
Technical, sentiment and strategy analysis for a cryptocurrency.
"""
import asyncio
import json
import sys
import argparse
from src.config.loader import config
from src.app import CryptoSenseiApp
from src.dashboard.server import DashboardServer
from src.logger.logger import Logger
from src.utils.graceful_shutdown_manager import GracefulShutdownManager
from src.utils.serialize import serialize_for_json


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CryptoSensei - crypto market analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python start.py                    # Analyze default coin from config
  python start.py ethereum           # Analyze ethereum
  python start.py btc                # Ticker aliases resolve to coin ids
  python start.py --serve            # Run the dashboard API
  python start.py --serve --port 8080
        """
    )
    parser.add_argument(
        "symbol",
        nargs="?",
        default=None,
        help="Coin id or ticker (e.g., bitcoin, eth). Default: from config"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the dashboard API instead of printing one analysis"
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Dashboard host. Default: from config"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Dashboard port. Default: from config"
    )
    return parser.parse_args()


async def run_dashboard(app: CryptoSenseiApp, logger: Logger, host: str, port: int) -> None:
    server = DashboardServer(
        analysis_engine=app.analysis_engine,
        data_fetcher=app.data_fetcher,
        sentiment_engine=app.sentiment_engine,
        config=config,
        logger=logger,
        host=host,
        port=port,
    )
    server_task = await server.start()
    logger.info("Press Ctrl+C to stop")
    try:
        await server_task
    finally:
        await server.stop()


async def main_async(shutdown_manager: GracefulShutdownManager):
    """Async entry point for the application"""
    args = parse_args()

    logger = Logger(logger_name="CryptoSensei", logger_debug=config.LOGGER_DEBUG, log_dir=config.LOG_DIR)
    app = CryptoSenseiApp(logger, config, shutdown_manager)

    try:
        await app.initialize()
        if args.serve:
            await run_dashboard(
                app, logger,
                host=args.host or config.DASHBOARD_HOST,
                port=args.port or config.DASHBOARD_PORT,
            )
        else:
            result = await app.analyze(args.symbol or config.DEFAULT_SYMBOL)
            print(json.dumps(serialize_for_json(result.to_dict()), indent=2))
    except asyncio.CancelledError:
        logger.info("Cancelled, shutting down...")
    finally:
        await app.shutdown()


def main() -> None:
    """Main entry point with clean shutdown delegation."""
    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    shutdown_manager = GracefulShutdownManager(loop)
    shutdown_manager.setup_signal_handlers()

    try:
        loop.run_until_complete(main_async(shutdown_manager))
    except KeyboardInterrupt:
        print("\nKeyboardInterrupt received - initiating graceful shutdown...")
        loop.run_until_complete(shutdown_manager.shutdown_gracefully())
    finally:
        loop.close()


if __name__ == "__main__":
    main()
