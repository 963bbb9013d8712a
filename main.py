#!/usr/bin/env python3
# Copyright (c) 2025 [Harivatsa G A]. All rights reserved.
# This work is licensed under CC BY-NC-ND 4.0.
# https://creativecommons.org/licenses/by-nc-nd/4.0/
# Attribution required. Commercial use and modifications prohibited.

"""
Storefront Admin - Main Entry Point
"""

import sys
import argparse
import uvicorn
from loguru import logger

from storefront.core.config import Config, config
from storefront.core.exceptions import ConfigurationError
from storefront.core.logging_config import configure_logging_from_config, setup_logging
from storefront.core.constants import APP_NAME, APP_VERSION
from storefront.api.app import create_app


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} v{APP_VERSION} - Storefront admin service"
    )

    parser.add_argument(
        '--host',
        type=str,
        default=None,
        help='Host to bind to (default: from config)'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=None,
        help='Port to bind to (default: from config)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file (default: config.yaml next to this script)'
    )

    parser.add_argument(
        '--store-id',
        type=str,
        default=None,
        help='Store (project) id to manage (default: from config)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Logging level (default: from config)'
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    try:
        cfg = Config(args.config) if args.config else config
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        sys.exit(1)

    if args.store_id:
        cfg.set('store.project_id', args.store_id)

    # Configure logging
    configure_logging_from_config(cfg)

    # Override log level if specified
    if args.log_level:
        setup_logging(level=args.log_level)

    # Get host and port from args or config
    host = args.host or cfg.get('server.host', default='0.0.0.0')
    port = args.port or cfg.get('server.port', default=8000, expected_type=int)
    store_id = cfg.get('store.project_id', default='', expected_type=str)

    # Log startup info
    logger.info("=" * 60)
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    logger.info("=" * 60)
    logger.info(f"Host: {host}")
    logger.info(f"Port: {port}")
    logger.info(f"Store: {store_id or '(not configured)'}")
    logger.info(f"Environment: {cfg.env}")
    logger.info("=" * 60)

    try:
        app = create_app(cfg=cfg)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        sys.exit(1)

    # Run server
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info" if args.log_level is None else args.log_level.lower()
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
