"""
Logging setup shared by the backend and scripts
"""

import logging
import os

LOGGER_NAME = 'nova_launch'
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'


def setup_logging(log_dir: str = 'logs', debug: bool = False) -> logging.Logger:
    """Log to logs/backend.log (DEBUG) and the console (INFO)"""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    os.makedirs(log_dir, exist_ok=True)
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(os.path.join(log_dir, 'backend.log'), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Request log lines (combined format) go to the same handlers
    access_logger = logging.getLogger('aiohttp.access')
    access_logger.setLevel(logging.INFO)
    access_logger.addHandler(file_handler)
    access_logger.addHandler(console_handler)

    # Reduce noise from HTTP client libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logger
