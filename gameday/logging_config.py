"""Centralized logging configuration for the game-day engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Transport libraries that log every request at DEBUG/INFO
NOISY_LOGGERS = ('urllib3', 'requests')


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int | str = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    quiet_transport: bool = True,
) -> logging.Logger:
    """
    Configure logging for a game-day session.

    Attaches file and console handlers to the 'gameday' logger. Module loggers
    ('gameday.autosave', 'gameday.ledger', ...) propagate to it, so one call
    at startup covers the whole engine.

    Args:
        log_dir: Directory for session log files (default: ./logs)
        level: Logging level, numeric or name such as 'DEBUG' (default: INFO)
        log_to_file: Whether to write a per-session log file (default: True)
        log_to_console: Whether to log to stdout (default: True)
        quiet_transport: Raise urllib3/requests loggers to WARNING (default: True)

    Returns:
        Configured 'gameday' logger

    Example:
        from gameday.logging_config import setup_logging
        logger = setup_logging(level='DEBUG', log_to_file=False)
        logger.info("Opening game session")
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger('gameday')
    logger.setLevel(level)

    # Clear any existing handlers so repeated sessions don't duplicate output
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    console_formatter = logging.Formatter('%(levelname)s [%(name)s]: %(message)s')

    if log_to_file:
        if log_dir is None:
            log_dir = Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'gameday_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if quiet_transport:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str = 'gameday') -> logging.Logger:
    """
    Get an engine logger.

    Names without the 'gameday.' prefix are nested under it, so
    get_logger('ledger') and get_logger('gameday.ledger') are the same logger.
    """
    if name != 'gameday' and not name.startswith('gameday.'):
        name = f'gameday.{name}'
    return logging.getLogger(name)
