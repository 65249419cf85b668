"""
Canonical entry point for airgradient_bridge package.

Usage:
    airgradient-bridge --environment development
    airgradient-bridge --environment production --devices-file /etc/airgradient/devices.json
    airgradient-bridge --no-api
"""

import argparse
import logging
import os

from airgradient_core.config.environments import get_settings
from airgradient_core.domain.errors import DeviceConfigError

from airgradient_bridge.bridge import main as bridge_main


def setup_logging(config) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    return None


def main() -> None:
    """Main entry point for airgradient_bridge."""
    parser = argparse.ArgumentParser(description="AirGradient bridge")
    parser.add_argument(
        "--environment",
        choices=["production", "development", "testing"],
        default="development",
        help="Environment to run in",
    )
    parser.add_argument("--devices-file", help="Device list JSON (overrides config)")
    parser.add_argument(
        "--no-api", action="store_true", help="Poll devices without serving the HTTP API"
    )

    args = parser.parse_args()

    # Set environment variable for config
    os.environ["AIRGRADIENT_ENV"] = args.environment

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    log.info("Starting AirGradient bridge...")
    log.info(f"Environment: {args.environment}")
    log.info(f"Devices file: {args.devices_file or config.DEVICES_FILE}")

    try:
        bridge_main(devices_file=args.devices_file, with_api=not args.no_api)
    except DeviceConfigError as e:
        log.error(f"Cannot start: {e}")
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
