"""Log sink configuration for CLI runs."""

import sys

from loguru import logger


def configure_logging(verbose: bool = False) -> None:
    """Replace loguru's default sink with a stderr sink at the requested level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> | {message}",
    )
