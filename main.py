#!/usr/bin/env python3
"""
Permitsy - visa services site.

Main entry point serving the built frontend.
"""

import argparse
import sys

from loguru import logger
from pydantic import ValidationError as SettingsValidationError

from permitsy.constants import Timeouts
from permitsy.core.logger import setup_structured_logging
from permitsy.core.settings import get_settings


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Permitsy - serve the built frontend")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: PORT setting)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL setting)",
    )

    args = parser.parse_args()

    try:
        settings = get_settings()
    except SettingsValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup structured logging
    log_level = args.log_level or settings.log_level
    setup_structured_logging(
        log_level,
        json_format=settings.log_json,
        logs_dir=settings.log_dir,
        diagnose=settings.is_development(),
    )

    import uvicorn

    from web.app import create_app

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info(f"Serving {settings.dist_dir} on http://{host}:{port}")

    # Startup schema validation failures make uvicorn exit non-zero
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=log_level.lower(),
        timeout_graceful_shutdown=Timeouts.GRACEFUL_SHUTDOWN_SECONDS,
    )


if __name__ == "__main__":
    main()
