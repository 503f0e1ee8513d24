from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich, once per process."""
    root_logger = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING

    if not any(isinstance(handler, RichHandler) for handler in root_logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root_logger.addHandler(handler)

    root_logger.setLevel(level)
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)
