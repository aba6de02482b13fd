"""Logging configuration helpers."""

import logging

APP_LOGGER = "plex_board"

# Per-request INFO lines from the HTTP stack drown out the board's own
# logs once a few servers are streaming.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    """Configure the ``plex_board`` logger at ``level``.

    Safe to call repeatedly; only the level changes after the first call.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(resolved)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
