"""Logging setup for the orchestrator and CLI."""
import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "acorn"


def configure_logging(debug: bool = False, console: Console = None) -> logging.Logger:
    """Attach a rich handler to the package logger.

    Args:
        debug: If True, log at DEBUG level instead of INFO.
        console: Console to render to; defaults to stderr.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
