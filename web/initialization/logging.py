"""
Web Initialization - Logging Module.

Module: logging.py
Configures loguru for the web service: console plus a rotated file.
Production logs are written as JSON lines.
"""

import sys

from loguru import logger

from app.config.settings import Settings, settings as default_settings


LOG_FILE = "logs/web.log"


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure console and file sinks."""
    cfg = app_settings or default_settings

    logger.remove()
    logger.add(sys.stderr, level=cfg.log_level)
    logger.add(
        LOG_FILE,
        rotation="1 day",
        retention="7 days",
        level=cfg.log_level,
        encoding="utf-8",
        serialize=cfg.is_production,
    )

    logger.info(f"Starting deposit service ({cfg.environment})...")
