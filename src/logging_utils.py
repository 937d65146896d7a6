"""
Logging configuration helpers shared by the pipeline scripts and the dashboard.
"""

import logging

import config

_LOGGING_CONFIGURED = False


def configure_logging():
    """Configure process-wide logging from config.LOG_LEVEL."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.LOG_FORMAT)
    _LOGGING_CONFIGURED = True
