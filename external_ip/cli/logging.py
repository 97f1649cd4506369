"""
Logging utilities for the external-ip command.
"""

import logging
import sys
import time
from pathlib import Path


def setup_logging(
    name: str = "external_ip",
    level: str = "INFO",
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for the command line tool.

    Console output goes to stderr so stdout carries only the resolved address.

    Args:
        name: Logger name to configure (the package logger by default)
        level: Console log level
        log_dir: If given, also write DEBUG logs to a timestamped file there

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers = []  # Clear any existing handlers

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(threadName)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)
        logger.debug(f"Log file: {log_file}")

    # Prevent propagation to root logger (avoid duplicate messages)
    logger.propagate = False

    # Connection pool chatter drowns out the per-voter messages
    logging.getLogger("urllib3").setLevel(logging.ERROR)

    return logger
