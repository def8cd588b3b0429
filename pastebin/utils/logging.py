"""Gives out a production-ready logger.

This module provides:
- setup_logging: a function to assign app logging to a rotating file handler
"""

import logging
import os
from logging.handlers import RotatingFileHandler


def setup_logging(app):
    """Sets logging of a Flask app to .log file and std stream.

    ``app.logger`` is the ``pastebin`` logger, so module loggers of the package
    propagate into the same handlers.

    Args:
        app (Flask): The Flask app to configure
    """

    log_level = logging.DEBUG if app.config["DEBUG"] else logging.INFO

    handlers = []
    if app.config["LOG_TO_FILE"]:
        log_dir = app.config["LOG_DIR"]
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"), maxBytes=10_000_000, backupCount=5
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]")
        )
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    app.logger.handlers = handlers
    app.logger.setLevel(log_level)
