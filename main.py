# main.py

"""Entry point for the fuel_monitor service (daemon or one-shot CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("fuel_monitor.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fuel_monitor",
        description=(
            "Poll the fuel balance page and report notable changes "
            "to Telegram."
        ),
        epilog=f"Source: {Settings.SOURCE_URL}",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run a single poll cycle and exit.",
    )
    mode.add_argument(
        "--file",
        default=None,
        metavar="PATH",
        help="Parse a saved HTML page instead of fetching.",
    )
    mode.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Check connectivity to the source page and Telegram.",
    )
    parser.add_argument(
        "--notify",
        action="store_true",
        default=False,
        help="With --once, also send the Telegram summary.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format for --once/--file (default: table).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to the console.",
    )
    return parser


def main() -> None:
    """Route to the daemon (no flags) or a one-shot command."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("fuel_monitor starting, log file: %s", log_file)

    from src.cli import runner

    try:
        if args.health:
            exit_code = asyncio.run(runner.run_health_check())
        elif args.file is not None:
            exit_code = runner.run_file(args.file, args.output_format)
        elif args.once:
            exit_code = asyncio.run(
                runner.run_once(args.notify, args.output_format)
            )
        else:
            exit_code = asyncio.run(runner.run_daemon())
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        raise
    finally:
        logger.info("fuel_monitor shutting down")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
