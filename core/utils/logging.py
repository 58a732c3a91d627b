"""Centralized logging configuration."""

import logging
import sys
from typing import Optional


def setup_logging(
    level: str = "WARNING", format_style: str = "standard", log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for vaultsh.

    Logs go to stderr because stdout is shared with the child process.
    Secret values are never passed to a logger; only app names, paths,
    line counts and key names are.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_style: 'standard' for terminals, 'json' for log collectors
        log_file: Optional file path to write logs

    Returns:
        Root logger
    """
    if format_style == "json":
        fmt = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    handlers: list = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger()


def resolve_level(
    level: Optional[str] = None, verbose: bool = False, quiet: bool = False
) -> str:
    """
    Pick the log level from CLI flags.

    An explicit level wins; otherwise --verbose means DEBUG and --quiet
    means ERROR. The default stays at WARNING so status output is not
    drowned in log lines.
    """
    if level:
        return level.upper()
    if verbose:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return "WARNING"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Usage:
        from core.utils.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    return logging.getLogger(name)
