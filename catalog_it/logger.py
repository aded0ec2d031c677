# catalog-it Logging
# Route library log records through Rich

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are noisy at DEBUG
_QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """
    Install a Rich handler on the catalog_it logger.

    Args:
        verbose: Log per-item debug details instead of warnings only.
        console: Rich console to write to (stderr console if not provided).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("catalog_it")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
