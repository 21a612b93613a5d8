"""
Logging Configuration

Logging for the submission pipeline and the scripts that drive it.
Records go to stderr; stdout is left to the scripts' own report lines.

Uploads and API calls go through requests/urllib3, which log every
connection at DEBUG. Those loggers are held at WARNING unless --verbose.
"""

import logging
import sys

PACKAGE_LOGGER = "storefront"
HTTP_LOGGERS = ("urllib3", "requests")

LOG_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s " + LOG_FORMAT


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Route pipeline logs to stderr.

    Args:
        verbose: DEBUG level, timestamps, and HTTP library output
        quiet: Warnings and errors only (ignored when verbose is set)

    Returns:
        The package logger
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger
