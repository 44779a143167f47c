"""Gives out a production-ready logger.

This module provides:
- setup_logging: a function to assign app logging to a rotating file handler
"""

import logging
import os
from logging.handlers import RotatingFileHandler


def setup_logging(app):
    """Sets logging of a Flask app to a .log file and std stream.

    The file handler is skipped when ``LOG_FILE`` is empty.

    Args:
        app (Flask): The Flask app to configure
    """

    log_level = logging.DEBUG if app.config["DEBUG"] else logging.INFO
    handlers = []

    log_file = app.config.get("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(log_file, maxBytes=10_000_000, backupCount=5)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]")
        )
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    app.logger.handlers = handlers
    app.logger.setLevel(log_level)

    # Generator warnings (clock regressions) end up next to the app's own
    library_logger = logging.getLogger("flakeid.utils")
    library_logger.handlers = list(handlers)
    library_logger.setLevel(log_level)
