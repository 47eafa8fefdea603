"""Logging setup."""

import logging
from pathlib import Path
from typing import Optional

LOG_DIR = Path.home() / ".cache" / "koka_sources"


def setup_logging(verbose: bool = False, log_dir: Optional[Path] = None):
    """Setup logging configuration."""
    log_dir = log_dir or LOG_DIR

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # File handler, skipped when the cache directory is not writable
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "update-sources.log")
    except OSError as e:
        file_handler = None
        logger.debug("File logging disabled: %s", e)
    if file_handler is not None:
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # aiohttp is chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
