#!/usr/bin/env python3
"""
Launcher for the ECG Monitor GUI.
This script checks that all dependencies are available, sets up logging and
starts the application.
"""
import argparse
import importlib
import logging
import sys
from typing import List, Optional

from config import DEFAULT_LOG_LEVEL, LOG_FORMAT

logger = logging.getLogger(__name__)


def check_requirements() -> bool:
    """Check if required packages are installed."""
    required = ['serial', 'matplotlib', 'tkinter']
    missing = []

    for package in required:
        try:
            importlib.import_module(package)
        except ImportError:
            missing.append(package)

    if missing:
        logger.error("Missing required packages: %s", ", ".join(missing))
        logger.error("Please install with: pip install -e .")
        return False
    return True


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ECG Monitor")
    parser.add_argument(
        "--port",
        help="Serial port to preselect (e.g. COM3 or /dev/ttyACM0)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Start in demo mode with the synthetic waveform",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging verbosity (default: {DEFAULT_LOG_LEVEL})",
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Main launcher function."""
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    if not check_requirements():
        sys.exit(1)

    logger.info("Starting ECG Monitor")
    try:
        from ecg_monitor_gui import EcgMonitorApp
        app = EcgMonitorApp(port=args.port)
        app.run(demo=args.demo)
    except Exception:
        logger.exception("Error running application")
        sys.exit(1)


if __name__ == "__main__":
    main()
