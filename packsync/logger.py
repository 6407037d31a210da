"""Logging setup for the packsync command line."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "packsync"


def setup_logging(
    console: Optional[Console] = None,
    *,
    verbose: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the packsync logger hierarchy.

    Library modules only call ``logging.getLogger(__name__)``; handlers are
    installed here, once, by the CLI.

    Args:
        console: Rich console the handler writes to (shared with progress output)
        verbose: Log DEBUG messages instead of INFO
        log_file: Optional path of a plain-text log file

    Returns:
        The configured "packsync" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_level=verbose,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(rich_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
