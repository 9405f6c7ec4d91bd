"""Logging configuration and error reporting helpers."""

from __future__ import annotations

import logging

from bipartite_rank.errors import BipartiteRankError

DEFAULT_LOGGER_NAME = "bipartite_rank"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: int = DEFAULT_LOG_LEVEL,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
    force: bool = False,
) -> logging.Logger:
    logging.basicConfig(level=level, format=fmt, force=force)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def progress_logger(logger: logging.Logger, verbose: bool):
    """Return the logging method used for progress messages.

    ``verbose`` only changes the level progress is reported at, never what
    gets computed.
    """
    return logger.info if verbose else logger.debug


def get_user_message(exc: BaseException) -> str:
    if isinstance(exc, BipartiteRankError):
        return exc.user_message
    return f"Unexpected error: {exc}"


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
) -> str:
    user_message = get_user_message(exc)
    logger.error(user_message)
    if isinstance(exc, BipartiteRankError) and exc.context:
        logger.debug(exc.log_message())
    if show_traceback:
        logger.error("Detailed traceback:", exc_info=exc)
    else:
        logger.debug("Detailed traceback:", exc_info=exc)
    return user_message


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "configure_logging",
    "progress_logger",
    "get_user_message",
    "log_exception",
]
