"""
Runner Logging
Routes every fivetran_runner logger to stdout and, when `logging.file` is set, a rotating log file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from fivetran_runner.config_manager import ConfigManager


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger from the `logging` config section.

    Scripts call this once before touching the API. Calling it again replaces
    the previous handlers.

    Args:
        level: Level name taking precedence over `logging.level`, e.g. from --verbose
    """
    config = ConfigManager()
    log_config = config.get_logging_config()

    log_level = getattr(logging, (level or log_config.get('level', 'INFO')).upper())
    log_format = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = log_config.get('file', './logs/fivetran_runner.log')
    max_bytes = log_config.get('max_bytes', 10485760)  # 10MB
    backup_count = log_config.get('backup_count', 5)

    formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # An empty `file` setting keeps logging on the console only
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Connection pool chatter stays at WARNING even with --verbose
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; handlers come from the root configured by `setup_logging`."""
    return logging.getLogger(name)
